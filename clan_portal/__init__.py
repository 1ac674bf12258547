import importlib.util


def _use_pymysql_as_mysqldb() -> None:
    # mysqlclient is used as-is when installed.
    if importlib.util.find_spec("MySQLdb") is not None:
        return
    import pymysql

    pymysql.install_as_MySQLdb()


_use_pymysql_as_mysqldb()
