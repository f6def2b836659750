"""End-to-end tests for Mapper classes and runtime extension."""

from enum import Enum
from typing import Optional
from unittest.mock import Mock

import pytest

from attrmap import Mapper, SchemaModule, SchemaViolation, attribute, dig, mapper_class
from attrmap.core.models import AttributeDefinition


class Key(Enum):
    PERSON_ID = "person_id"
    SURNAME = "surname"
    ADDRESS = "address"
    STREET = "street"


class PersonMapper(Mapper):
    id = attribute(int, source="person_id", required=True, strict=True)
    first_name = attribute(str)
    last_name = attribute(str, source="surname")
    address = attribute(str, source=lambda atts: atts["address"]["street"], default="")


class EmploymentMapper(SchemaModule):
    company = attribute(str, source="business")
    job_title = attribute(str, source="position")
    salary = attribute(int)
    fulltime = attribute(bool)


class TraitsMapper(SchemaModule):
    eye_color = attribute(str, source="eyecolor")


class DogMapper(Mapper):
    name = attribute(str, source="shelter", default="Spot")


PERSON_DATA = {
    "person_id": 1,
    "first_name": "John",
    "surname": "Doe",
    "address": {"street": "1122 Something Avenue"},
    "unused": True,
}

EMPLOYMENT_DATA = {
    "business": "RentPath",
    "position": "Programmer",
    "salary": "100",
    "fulltime": "1",
}


@pytest.fixture
def person():
    return PersonMapper(PERSON_DATA)


class TestConstruction:
    """Mapping raw data at construction time."""

    def test_maps_own_name(self, person):
        assert person.first_name == "John"

    def test_maps_renamed_key(self, person):
        assert person.last_name == "Doe"

    def test_renamed_key_wins_over_own_name(self):
        person = PersonMapper({"person_id": 1, "surname": "Doe", "last_name": "Smith"})
        assert person.last_name == "Doe"

    def test_own_name_without_renamed_key_is_none(self):
        person = PersonMapper({"person_id": 1, "last_name": "Smith"})
        assert person.last_name is None

    def test_maps_computed_lookup(self, person):
        assert person.address == "1122 Something Avenue"

    def test_computed_lookup_receives_raw_data(self):
        lookup = Mock(return_value="Main Street")

        class Probe(Mapper):
            street = attribute(str, source=lookup)

        Probe({"person_id": 1, "unused": True})

        lookup.assert_called_once()
        data = lookup.call_args.args[0]
        assert data["person_id"] == 1
        assert data["unused"] is True

    def test_computed_lookup_failure_uses_default(self):
        person = PersonMapper({"person_id": 1})
        assert person.address == ""

    def test_id_coerced(self):
        assert PersonMapper({"person_id": "42"}).id == 42

    def test_enum_keys(self):
        person = PersonMapper(
            {
                Key.PERSON_ID: 7,
                Key.SURNAME: "Doe",
                Key.ADDRESS: {Key.STREET: "Elm"},
            }
        )
        assert person.id == 7
        assert person.last_name == "Doe"
        assert person.address == "Elm"

    def test_enum_source_option(self):
        class Surnames(Mapper):
            last_name = attribute(str, source=Key.SURNAME)

        assert Surnames.attribute_schema["last_name"].source.key == "surname"
        assert Surnames({"surname": "Doe"}).last_name == "Doe"
        assert Surnames({Key.SURNAME: "Roe"}).last_name == "Roe"

    def test_keyword_arguments(self):
        person = PersonMapper(person_id=1, surname="Doe")
        assert person.last_name == "Doe"

    def test_keyword_arguments_override_mapping(self):
        person = PersonMapper({"person_id": 1, "surname": "Doe"}, surname="Roe")
        assert person.last_name == "Roe"

    def test_missing_required_raises(self):
        with pytest.raises(SchemaViolation) as exc_info:
            PersonMapper({"id": 1})
        assert exc_info.value.attribute == "id"
        assert exc_info.value.reason == "required"

    def test_strict_coercion_failure_raises(self):
        with pytest.raises(SchemaViolation) as exc_info:
            PersonMapper({"person_id": "abc"})
        assert exc_info.value.reason == "strict"

    def test_non_strict_failure_passes_raw_value(self):
        person = PersonMapper({"person_id": 1, "first_name": {"not": "text"}})
        assert person.first_name == {"not": "text"}

    def test_absent_attribute_is_none(self):
        assert PersonMapper({"person_id": 1}).first_name is None


class TestDefaults:
    """Default handling versus explicit None."""

    def test_default_when_absent(self):
        assert DogMapper().name == "Spot"

    def test_explicit_none_is_kept(self):
        assert DogMapper(name=None).name is None

    def test_explicit_none_under_renamed_key(self):
        assert DogMapper({"shelter": None}).name is None

    def test_renamed_key(self):
        assert DogMapper({"shelter": "Rex"}).name == "Rex"

    def test_factory_default_not_shared(self):
        class Basket(Mapper):
            items = attribute(list, default_factory=list)

        first, second = Basket(), Basket()
        first.items.append("apple")
        assert second.items == []


class TestInspection:
    """attribute_set(), raw_attributes() and friends."""

    def test_attribute_set_names(self, person):
        names = [d.name for d in person.attribute_set()]
        assert names == ["id", "first_name", "last_name", "address"]

    def test_attribute_set_not_class_schema(self, person):
        assert person._attribute_set is not PersonMapper.attribute_schema

    def test_raw_attributes_keep_unused_keys(self, person):
        assert person.raw_attributes()["unused"] is True

    def test_raw_attributes_is_a_copy(self, person):
        person.raw_attributes()["unused"] = False
        assert person.raw_attributes()["unused"] is True

    def test_unmapped_key_not_an_attribute(self, person):
        with pytest.raises(AttributeError):
            person.unused

    def test_source_key_not_an_attribute(self, person):
        with pytest.raises(AttributeError):
            person.surname

    def test_to_dict(self, person):
        assert person.to_dict() == {
            "id": 1,
            "first_name": "John",
            "last_name": "Doe",
            "address": "1122 Something Avenue",
        }

    def test_equality_by_values(self, person):
        assert person == PersonMapper(PERSON_DATA)
        assert person != PersonMapper({**PERSON_DATA, "surname": "Roe"})

    def test_repr(self):
        assert repr(DogMapper()) == "DogMapper(name='Spot')"


class TestAssignment:
    """Writing attributes goes through the same coercion gate."""

    def test_assignment_coerces(self, person):
        person.id = "7"
        assert person.id == 7

    def test_strict_assignment_failure_raises(self, person):
        with pytest.raises(SchemaViolation):
            person.id = "seven"

    def test_runtime_attribute_assignment_coerces(self, person):
        person.add_attributes(EmploymentMapper, EMPLOYMENT_DATA)
        person.salary = "250"
        assert person.salary == 250


class TestAddAttributes:
    """Runtime extension of a single instance."""

    def test_class_schema_unchanged(self, person):
        before = PersonMapper.attribute_schema.names()
        person.add_attributes(EmploymentMapper, EMPLOYMENT_DATA)
        assert PersonMapper.attribute_schema.names() == before

    def test_attribute_set_extended(self, person):
        person.add_attributes(EmploymentMapper, EMPLOYMENT_DATA)
        names = [d.name for d in person.attribute_set()]
        assert names == [
            "id",
            "first_name",
            "last_name",
            "address",
            "company",
            "job_title",
            "salary",
            "fulltime",
        ]

    def test_values_coerced(self, person):
        person.add_attributes(EmploymentMapper, EMPLOYMENT_DATA)
        assert person.company == "RentPath"
        assert person.job_title == "Programmer"
        assert person.salary == 100
        assert person.fulltime is True

    def test_multiple_modules(self, person):
        person.add_attributes(EmploymentMapper, EMPLOYMENT_DATA)
        person.add_attributes(TraitsMapper, {"eyecolor": "Blue"})
        assert person.company == "RentPath"
        assert person.eye_color == "Blue"

    def test_other_instances_unaffected(self, person):
        other = PersonMapper(PERSON_DATA)
        person.add_attributes(EmploymentMapper, EMPLOYMENT_DATA)

        with pytest.raises(AttributeError):
            other.company
        assert "company" not in [d.name for d in other.attribute_set()]

    def test_extra_data_merged_into_raw(self, person):
        person.add_attributes(EmploymentMapper, EMPLOYMENT_DATA)
        raw = person.raw_attributes()
        assert raw["business"] == "RentPath"
        assert raw["unused"] is True

    def test_extra_data_wins_over_stored_data(self):
        person = PersonMapper({**PERSON_DATA, "salary": "50"})
        person.add_attributes(EmploymentMapper, {"salary": "100"})
        assert person.salary == 100

    def test_uses_stored_data_without_extra(self):
        person = PersonMapper({**PERSON_DATA, **EMPLOYMENT_DATA})
        person.add_attributes(EmploymentMapper)
        assert person.company == "RentPath"

    def test_existing_attributes_not_recomputed(self, person):
        person.add_attributes(EmploymentMapper, {"surname": "Roe"})
        assert person.last_name == "Doe"
        assert person.raw_attributes()["surname"] == "Roe"

    def test_conflicting_definition_replaces(self, person):
        class AltNames(SchemaModule):
            last_name = attribute(str, source="family_name")

        person.add_attributes(AltNames, {"family_name": "Roe"})

        assert person.last_name == "Roe"
        assert [d.name for d in person.attribute_set()].index("last_name") == 2
        assert PersonMapper.attribute_schema["last_name"].source.key == "surname"
        assert PersonMapper(PERSON_DATA).last_name == "Doe"

    def test_readding_module_resolves_again(self, person):
        lookup = Mock(return_value="x")

        class Badge(SchemaModule):
            badge = attribute(str, source=lookup)

        person.add_attributes(Badge)
        person.add_attributes(Badge)
        assert lookup.call_count == 2

    def test_readding_module_picks_up_new_data(self, person):
        person.add_attributes(EmploymentMapper, EMPLOYMENT_DATA)
        person.add_attributes(EmploymentMapper, {"salary": 200})

        assert person.raw_attributes()["salary"] == 200
        assert person.salary == 200
        assert person.company == "RentPath"

    def test_reserved_name_rejected(self, person):
        definition = AttributeDefinition(name="to_dict", declared_type=str)
        with pytest.raises(TypeError):
            person.add_attributes([definition])
        assert "to_dict" not in [d.name for d in person.attribute_set()]

    def test_failure_keeps_earlier_attributes(self, person):
        class Badge(SchemaModule):
            nickname = attribute(str)
            badge = attribute(int, required=True)
            locker = attribute(int)

        with pytest.raises(SchemaViolation) as exc_info:
            person.add_attributes(Badge, {"nickname": "JD", "locker": "12"})

        assert exc_info.value.attribute == "badge"
        names = [d.name for d in person.attribute_set()]
        assert "nickname" in names
        assert "badge" not in names
        assert "locker" not in names
        assert person.nickname == "JD"
        assert person.last_name == "Doe"

    def test_accepts_definitions(self, person):
        definition = AttributeDefinition(name="nickname", declared_type=str)
        person.add_attributes([definition], {"nickname": "JD"})
        assert person.nickname == "JD"

    def test_rejects_non_schema(self, person):
        with pytest.raises(TypeError):
            person.add_attributes("EmploymentMapper")


class TestComposition:
    """Class-level composition of schemas."""

    def test_schema_module_not_instantiable(self):
        with pytest.raises(TypeError):
            EmploymentMapper({})

    def test_mixin(self):
        class Staff(PersonMapper, EmploymentMapper):
            pass

        staff = Staff({**PERSON_DATA, **EMPLOYMENT_DATA})
        assert staff.last_name == "Doe"
        assert staff.company == "RentPath"
        assert set(Staff.attribute_schema.names()) == {
            "id",
            "first_name",
            "last_name",
            "address",
            "company",
            "job_title",
            "salary",
            "fulltime",
        }

    def test_subclass_redeclaration_keeps_position(self):
        class Nicknamed(PersonMapper):
            first_name = attribute(str, source="nick")

        assert Nicknamed.attribute_schema.names() == PersonMapper.attribute_schema.names()
        assert Nicknamed({"person_id": 1, "nick": "Johnny"}).first_name == "Johnny"
        assert PersonMapper.attribute_schema["first_name"].source.kind == "absent"

    def test_include(self):
        class Contractor(Mapper):
            name = attribute(str)

        added = Contractor.include(TraitsMapper)

        assert [d.name for d in added] == ["eye_color"]
        assert Contractor({"eyecolor": "Green"}).eye_color == "Green"

    def test_include_keeps_existing_definitions(self):
        class Pound(Mapper):
            name = attribute(str)

        Pound.include(DogMapper)
        assert Pound.attribute_schema["name"].source.kind == "absent"

    def test_reserved_name_rejected(self):
        with pytest.raises((TypeError, RuntimeError)):

            class Broken(Mapper):
                to_dict = attribute(str)

    def test_include_rejects_reserved_names(self):
        class Contractor(Mapper):
            name = attribute(str)

        definition = AttributeDefinition(name="to_dict", declared_type=str)
        with pytest.raises(TypeError):
            Contractor.include([definition])

        assert "to_dict" not in Contractor.attribute_schema
        assert Contractor({"name": "Ann"}).to_dict() == {"name": "Ann"}

    def test_mapper_class_rejects_reserved_names(self):
        with pytest.raises(TypeError):
            mapper_class("Broken", [AttributeDefinition(name="include")])

    def test_mapper_class_from_definitions(self):
        Generated = mapper_class(
            "Generated",
            [AttributeDefinition(name="street", declared_type=str, source=dig("address", "street"))],
        )
        assert Generated({"address": {"street": "Main"}}).street == "Main"

    def test_mapper_class_source_shorthand(self):
        Generated = mapper_class(
            "Generated",
            [AttributeDefinition(name="last_name", declared_type=str, source="surname")],
        )
        assert Generated({"surname": "Doe"}).last_name == "Doe"

    def test_mapper_class_duplicate_names(self):
        definition = AttributeDefinition(name="street", declared_type=str)
        with pytest.raises(SchemaViolation):
            mapper_class("Broken", [definition, definition])


class AddressMapper(Mapper):
    street = attribute(str)
    zip_code = attribute(str, source="zip")


class CustomerMapper(Mapper):
    name = attribute(str)
    address = attribute(AddressMapper)
    previous = attribute(list[AddressMapper], default_factory=list)


class TestNestedMappers:
    """Attributes whose type is another Mapper."""

    def test_nested_object(self):
        customer = CustomerMapper({"name": "Ann", "address": {"street": "Main", "zip": 30301}})
        assert isinstance(customer.address, AddressMapper)
        assert customer.address.zip_code == "30301"

    def test_nested_list(self):
        customer = CustomerMapper(
            {"name": "Ann", "previous": [{"street": "Elm"}, {"street": "Oak"}]}
        )
        assert [a.street for a in customer.previous] == ["Elm", "Oak"]

    def test_nested_to_dict(self):
        customer = CustomerMapper({"name": "Ann", "address": {"street": "Main"}})
        assert customer.to_dict() == {
            "name": "Ann",
            "address": {"street": "Main", "zip_code": None},
            "previous": [],
        }

    def test_nested_violation_propagates(self):
        class Owner(Mapper):
            person = attribute(PersonMapper)

        with pytest.raises(SchemaViolation) as exc_info:
            Owner({"person": {"surname": "Doe"}})
        assert exc_info.value.attribute == "id"

    def test_optional_nested(self):
        class Contact(Mapper):
            address = attribute(Optional[AddressMapper])

        assert Contact({"address": {"street": "Main"}}).address.street == "Main"
        assert Contact({"address": None}).address is None

    def test_nested_dict_values(self):
        class Directory(Mapper):
            offices = attribute(dict[str, AddressMapper])

        directory = Directory({"offices": {"hq": {"street": "Main"}}})
        assert directory.offices["hq"].street == "Main"
        assert directory.to_dict() == {
            "offices": {"hq": {"street": "Main", "zip_code": None}},
        }


class Gadget:
    """Plain class pydantic has no schema for."""


class TestUnsupportedTypes:
    """Declared types the coercion provider cannot build."""

    def test_non_strict_passes_raw_value(self):
        class Box(Mapper):
            thing = attribute(Gadget)

        assert Box({"thing": 1}).thing == 1

    def test_strict_raises(self):
        class Box(Mapper):
            thing = attribute(Gadget, strict=True)

        with pytest.raises(SchemaViolation) as exc_info:
            Box({"thing": 1})
        assert exc_info.value.reason == "strict"
