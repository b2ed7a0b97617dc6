"""Helpers for asserting on SQL issued through mocked engines."""


def begin_connection(engine):
    """Connection yielded by ``with engine.begin() as connection``."""
    return engine.begin.return_value.__enter__.return_value


def connect_connection(engine):
    """Connection yielded by ``with engine.connect() as connection``."""
    return engine.connect.return_value.__enter__.return_value


def autocommit_connection(engine):
    """Connection yielded by an AUTOCOMMIT ``execution_options(...).connect()``."""
    return engine.execution_options.return_value.connect.return_value.__enter__.return_value


def executed_sql(connection) -> list:
    """SQL text of every ``execute`` call, in order."""
    return [str(call.args[0]) for call in connection.execute.call_args_list]


def driver_sql(connection) -> list:
    """Statements of every ``exec_driver_sql`` call, in order."""
    return [call.args[0] for call in connection.exec_driver_sql.call_args_list]
