import pytest

from apigw_kit.definition import Definition
from apigw_kit.errors import BkApiError, NotFoundError


@pytest.fixture
def definition():
    return Definition(
        {
            "sub": {
                "name": "testing",
                "value": {"foo": "bar"},
            },
        }
    )


def test_returns_subdefinition(definition):
    sub = definition.get("sub")
    assert sub["name"] == "testing"


def test_returns_deep_subdefinition(definition):
    sub = definition.get("sub.value")
    assert sub["foo"] == "bar"


def test_missing_subdefinition_raises(definition):
    with pytest.raises(NotFoundError):
        definition.get("not_found")


def test_non_mapping_value_is_not_found(definition):
    with pytest.raises(NotFoundError) as info:
        definition.get("sub.name")
    assert "sub.name" in str(info.value)


def test_empty_namespace_returns_whole_definition(definition):
    assert definition.get("") is definition.definition


def test_get_returns_held_mapping(definition):
    definition.get("sub")["extra"] = 1
    assert definition.get("sub")["extra"] == 1


def test_empty_definition_namespace_not_found():
    with pytest.raises(NotFoundError):
        Definition(None).get("sub")


def test_from_yaml():
    definition = Definition.from_yaml(b"sub:\n  name: testing")
    sub = definition.get("sub")
    assert sub["name"] == "testing"


def test_from_yaml_text():
    definition = Definition.from_yaml("key: test")
    assert definition.get("") == {"key": "test"}


def test_from_yaml_invalid_document():
    with pytest.raises(BkApiError):
        Definition.from_yaml("key: [unclosed")


def test_from_yaml_non_mapping():
    with pytest.raises(BkApiError):
        Definition.from_yaml("- a\n- b\n")