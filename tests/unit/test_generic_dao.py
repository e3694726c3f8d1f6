"""
Unit tests for GenericDao decision logic.

The executor is a mock, so these tests check which statements are built and
in which order, and how entity state follows the reported results.
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from conftest import Address, Person
from entity_dao.exceptions import ConfigurationError
from entity_dao.repositories import ExternallyGeneratedKeys, GenericDao


class NotAnEntity:
    id = None


def test_keys_generated_by_database_by_default(mock_dao):
    assert mock_dao.keys_generated_by_database is True


@pytest.mark.parametrize("key, expected", [
    (None, False),
    (0, False),
    (0.0, False),
    (7, True),
    (-1, True),
    ("abc", True),
    ("0", True),
    (False, True),
    (float("nan"), False),
    (Decimal("NaN"), False),
    (float("inf"), True),
    (Decimal("-Infinity"), True),
])
def test_is_persistent(mock_dao, registry, key, expected):
    descriptor = registry.lookup(Person)
    assert mock_dao.is_persistent(descriptor, Person(id=key)) is expected


def test_store_unregistered_type_fails(mock_dao, mock_executor):
    with pytest.raises(ConfigurationError, match="Not an entity"):
        mock_dao.store(NotAnEntity())
    mock_executor.query.assert_not_called()


def test_store_transient_inserts_and_sets_generated_key(mock_dao, mock_executor, mock_query):
    mock_query.generated_key = 7
    person = Person(name="Ann")

    result = mock_dao.store(person)

    assert result is person
    assert person == Person(id=7, name="Ann")
    mock_executor.query.assert_called_once()
    statement = mock_executor.query.call_args.args[0]
    assert str(statement).startswith("INSERT INTO person")
    mock_query.request_generated_key.assert_called_once()
    mock_query.execute_update.assert_called_once()
    mock_query.__exit__.assert_called_once()


def test_store_zero_id_is_inserted(mock_dao, mock_executor, mock_query):
    mock_query.generated_key = 3
    person = Person(id=0, name="Zed")

    mock_dao.store(person)

    assert person.id == 3
    assert str(mock_executor.query.call_args.args[0]).startswith("INSERT INTO person")


def test_store_persistent_updates_without_touching_id(mock_dao, mock_executor, mock_query):
    person = Person(id=7, name="Ann")

    mock_dao.store(person)

    assert person.id == 7
    mock_executor.query.assert_called_once()
    assert str(mock_executor.query.call_args.args[0]).startswith("UPDATE person")
    mock_query.auto_close.assert_called_once()
    mock_query.request_generated_key.assert_not_called()


def test_second_store_updates(mock_dao, mock_executor, mock_query):
    mock_query.generated_key = 7
    person = Person(name="Ann")

    mock_dao.store(person)
    mock_dao.store(person)

    statements = [str(c.args[0]) for c in mock_executor.query.call_args_list]
    assert statements[0].startswith("INSERT")
    assert statements[1].startswith("UPDATE")
    assert person.id == 7


def test_store_releases_query_when_insert_fails(mock_dao, mock_query):
    mock_query.execute_update.side_effect = OperationalError("INSERT", {}, Exception("gone"))
    person = Person(name="Ann")

    with pytest.raises(OperationalError):
        mock_dao.store(person)

    mock_query.__exit__.assert_called_once()
    assert person.id is None


def test_store_without_key_generator_fails_before_any_statement(mock_dao, mock_executor):
    mock_dao.keys_generated_by_database = False
    person = Person(name="Ann")

    with pytest.raises(ConfigurationError):
        mock_dao.store(person)

    mock_executor.query.assert_not_called()
    assert person.id is None


def test_store_with_external_generator_sets_key_before_insert(registry, mock_executor, mock_query):
    allocated = []

    def generator(descriptor):
        allocated.append(descriptor.entity_type)
        return 42

    dao = GenericDao(registry, mock_executor, key_strategy=ExternallyGeneratedKeys(generator))
    person = Person(name="Ann")

    dao.store(person)

    assert allocated == [Person]
    assert person.id == 42
    statement = mock_executor.query.call_args.args[0]
    assert statement.compile().params["id"] == 42
    mock_query.request_generated_key.assert_not_called()
    mock_query.__exit__.assert_called_once()


def test_disabling_database_keys_keeps_injected_generator(registry, mock_executor):
    dao = GenericDao(registry, mock_executor, key_strategy=ExternallyGeneratedKeys(lambda descriptor: 5))

    dao.keys_generated_by_database = False
    person = dao.store(Person(name="Ann"))

    assert person.id == 5
    assert dao.keys_generated_by_database is False


def test_enabling_database_keys_replaces_generator(registry, mock_executor, mock_query):
    dao = GenericDao(registry, mock_executor, key_strategy=ExternallyGeneratedKeys(lambda descriptor: 5))
    mock_query.generated_key = 8

    dao.keys_generated_by_database = True
    person = dao.store(Person(name="Ann"))

    assert person.id == 8
    mock_query.request_generated_key.assert_called_once()


def test_subclass_hook_supplies_keys(registry, mock_executor):
    class SequenceDao(GenericDao):
        def generate_next_id(self, descriptor):
            return 100

    dao = SequenceDao(registry, mock_executor)
    dao.keys_generated_by_database = False

    person = dao.store(Person(name="Ann"))

    assert person.id == 100
    assert dao.keys_generated_by_database is False


def test_save_all_stops_at_first_failure(mock_dao, mock_executor, mock_query):
    error = IntegrityError("INSERT", {}, Exception("constraint"))
    mock_query.execute_update.side_effect = [1, error, 1]
    people = [Person(name="a"), Person(name="b"), Person(name="c")]

    with pytest.raises(IntegrityError):
        mock_dao.save_all(people)

    assert mock_executor.query.call_count == 2


def test_update_all_stops_at_first_failure(mock_dao, mock_executor, mock_query):
    error = OperationalError("UPDATE", {}, Exception("gone"))
    mock_query.execute_update.side_effect = [1, error, 1]
    people = [Person(id=1, name="a"), Person(id=2, name="b"), Person(id=3, name="c")]

    with pytest.raises(OperationalError):
        mock_dao.update_all(people)

    assert mock_executor.query.call_count == 2


def test_delete_all_by_id_stops_at_first_failure(mock_dao, mock_executor, mock_query):
    error = IntegrityError("DELETE", {}, Exception("constraint"))
    mock_query.execute_update.side_effect = [1, error, 1]
    people = [Person(id=1, name="a"), Person(id=2, name="b"), Person(id=3, name="c")]

    with pytest.raises(IntegrityError):
        mock_dao.delete_all_by_id(people)

    assert mock_executor.query.call_count == 2
    assert [p.id for p in people] == [0, 2, 3]


def test_update_property_sets_value_after_success(mock_dao, mock_executor):
    person = Person(id=7, name="Ann", score=1)

    result = mock_dao.update_property(person, "score", 5)

    assert result is person
    assert person.score == 5
    params = mock_executor.query.call_args.args[0].compile().params
    assert params["score"] == 5


def test_update_property_failure_leaves_entity_unchanged(mock_dao, mock_query):
    mock_query.execute_update.side_effect = OperationalError("UPDATE", {}, Exception("gone"))
    person = Person(id=7, name="Ann", score=1)

    with pytest.raises(OperationalError):
        mock_dao.update_property(person, "score", 5)

    assert person.score == 1


def test_update_property_pushes_current_value(mock_dao, mock_executor):
    person = Person(id=7, name="Ann", score=9)

    mock_dao.update_property(person, "score")

    params = mock_executor.query.call_args.args[0].compile().params
    assert params["score"] == 9
    assert person.score == 9


def test_update_property_unknown_name(mock_dao, mock_executor):
    with pytest.raises(ConfigurationError):
        mock_dao.update_property(Person(id=7), "nickname", "x")
    mock_executor.query.assert_not_called()


def test_delete_entity_resets_id_when_row_deleted(mock_dao, mock_query):
    mock_query.execute_update.return_value = 1
    person = Person(id=7, name="Ann")

    mock_dao.delete_by_id(person)

    assert person.id == 0


def test_delete_entity_keeps_id_when_nothing_deleted(mock_dao, mock_query):
    mock_query.execute_update.return_value = 0
    person = Person(id=7, name="Ann")

    mock_dao.delete_by_id(person)

    assert person.id == 7


def test_delete_none_is_noop(mock_dao, mock_executor):
    mock_dao.delete_by_id(None)
    mock_executor.query.assert_not_called()


def test_delete_by_type_and_id(mock_dao, mock_executor):
    assert mock_dao.delete_by_id(Person, 7) is None
    statement = mock_executor.query.call_args.args[0]
    assert str(statement).startswith("DELETE FROM person")
    assert statement.compile().params["id_1"] == 7


def test_decrease_property_subtracts(mock_dao, mock_executor):
    mock_dao.decrease_property(Person, 7, "score", 2)
    sql = str(mock_executor.query.call_args.args[0])
    assert "person.score - " in sql


def test_find_related_requires_foreign_key_property(mock_dao):
    with pytest.raises(ConfigurationError):
        mock_dao.find_related(Person, Address(id=1))
