"""
Tests for the scoped connection/command lifecycle.
"""
import dbaccess as db
import pytest
from dbaccess.command import Command


@pytest.fixture
def provider(mocker):
    """Provider whose connections and commands are mocks"""
    provider = mocker.Mock()
    provider.new_connection.return_value = mocker.Mock()
    provider.new_command.return_value = mocker.Mock(parameters=[])
    return provider


def test_session_opens_and_closes(provider):
    with db.Session(provider, 'sqlite:///x.db') as session:
        connection = session.connection
        command = session.command
        assert connection.connection_string == 'sqlite:///x.db'
        connection.open.assert_called_once()
        assert command.connection is connection

    command.close.assert_called_once()
    connection.close.assert_called_once()
    assert session.connection is None
    assert session.command is None


def test_session_closes_on_error(provider):
    with pytest.raises(db.StatementFailure):
        with db.Session(provider, 'sqlite:///x.db') as session:
            connection = session.connection
            command = session.command
            raise db.StatementFailure('boom')

    command.close.assert_called_once()
    connection.close.assert_called_once()


def test_session_closes_when_open_fails(provider):
    connection = provider.new_connection.return_value
    connection.open.side_effect = db.ConnectionFailure('refused')

    with pytest.raises(db.ConnectionFailure):
        with db.Session(provider, 'sqlite:///x.db'):
            pytest.fail('body must not run')

    connection.close.assert_called_once()
    provider.new_command.assert_not_called()


def test_session_without_command(provider):
    with db.Session(provider, 'sqlite:///x.db', with_command=False) as session:
        assert session.command is None
    provider.new_command.assert_not_called()


def test_prepare_binds_parameters(mocker):
    provider = db.resolve('sqlite')
    session = db.Session(provider, 'sqlite:///x.db')
    session.command = Command(provider)

    command = session.prepare('SELECT :id', ('id', 1, 'name', ''))
    assert command.text == 'SELECT :id'
    assert command.bound_parameters() == {'id': 1, 'name': None}

    command = session.prepare('SELECT 1')
    assert command.parameters == []


def test_command_requires_connection():
    command = db.resolve('sqlite').new_command()
    command.text = 'SELECT 1'
    with pytest.raises(db.ConnectionFailure):
        command.execute_scalar()


def test_command_requires_text(mocker):
    command = db.resolve('sqlite').new_command()
    command.connection = mocker.Mock()
    with pytest.raises(db.StatementFailure, match='no SQL text'):
        command.execute_non_query()


def test_connection_requires_connection_string():
    connection = db.resolve('sqlite').new_connection()
    with pytest.raises(db.ConnectionFailure, match='No connection string'):
        connection.open()
    assert not connection.is_open


def test_finish_commits_outside_transaction(mocker):
    command = db.resolve('sqlite').new_command()
    command.connection = mocker.Mock()
    cursor = mocker.Mock()
    command._cursors.append(cursor)

    command.finish()

    cursor.close.assert_called_once()
    command.connection.commit.assert_called_once()


def test_finish_leaves_transaction_to_owner(mocker):
    command = db.resolve('sqlite').new_command()
    command.connection = mocker.Mock()
    command.transaction = mocker.Mock()

    command.finish()

    command.connection.commit.assert_not_called()
    command.transaction.commit.assert_not_called()


def test_execute_scalar_commits_after_reading(mocker):
    command = db.resolve('sqlite').new_command()
    command.connection = mocker.Mock()
    cursor = command.connection.dbapi_connection.cursor.return_value
    cursor.description = [('id', None)]
    cursor.fetchone.return_value = (9,)
    command.text = 'INSERT INTO t (id) VALUES (9) RETURNING id'

    assert command.execute_scalar() == 9
    command.connection.commit.assert_called_once()
    cursor.close.assert_called_once()
