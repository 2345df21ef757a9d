"""
Tests for the record <-> DTO mapping contract.
"""

from datetime import datetime, timezone

import pytest
from hypothesis import given, strategies as st

from reptile_api.models import Enclosure, EnclosureType, ReptileImage
from reptile_api.schemas import EnclosureDto, ReptileImageDto
from reptile_api.services.crud.mapper import EntityMapper
from reptile_api.services.domain.enclosure_service import ENCLOSURE_MAPPER
from reptile_api.services.domain.reptile_image_service import INCLUDE_DATA, REPTILE_IMAGE_MAPPER

STAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)


def stored_enclosure(**fields) -> Enclosure:
    enclosure = Enclosure(
        id=3,
        owner_id=7,
        name="Tank-1",
        type=EnclosureType.TERRARIUM,
        substrate="Coco fibre",
        notes="Near the window",
        created_at=STAMP,
        created_by="alice",
        updated_at=STAMP,
        updated_by="alice",
    )
    for name, value in fields.items():
        setattr(enclosure, name, value)
    return enclosure


class TestToDto:
    def test_copies_business_identity_and_audit_fields(self):
        dto = ENCLOSURE_MAPPER.to_dto(stored_enclosure())

        assert dto.id == 3
        assert dto.name == "Tank-1"
        assert dto.type == EnclosureType.TERRARIUM
        assert dto.created_by == "alice"
        assert dto.updated_at == STAMP

    def test_excluded_field_needs_condition(self):
        image = ReptileImage(
            id=1, reptile_id=2, filename="a.png", content_type="image/png",
            image_data=b"\x89PNG", size=4,
        )

        plain = REPTILE_IMAGE_MAPPER.to_dto(image)
        with_data = REPTILE_IMAGE_MAPPER.to_dto(image, {INCLUDE_DATA: True})
        switched_off = REPTILE_IMAGE_MAPPER.to_dto(image, {INCLUDE_DATA: False})

        assert plain.image_data is None
        assert with_data.image_data == b"\x89PNG"
        assert switched_off.image_data is None

    def test_empty_conditions_match_unconditional_mapping(self):
        enclosure = stored_enclosure()
        assert ENCLOSURE_MAPPER.to_dto(enclosure, {}).model_dump() == (
            ENCLOSURE_MAPPER.to_dto(enclosure).model_dump()
        )


class TestToEntity:
    def test_never_copies_audit_fields(self):
        dto = EnclosureDto(
            name="Tank-1",
            type=EnclosureType.VIVARIUM,
            created_by="mallory",
            created_at=STAMP,
            updated_by="mallory",
        )

        entity = ENCLOSURE_MAPPER.to_entity(dto)

        assert entity.name == "Tank-1"
        assert entity.type == EnclosureType.VIVARIUM
        assert entity.created_by is None
        assert entity.created_at is None
        assert entity.updated_by is None

    def test_business_fields_survive_dto_and_back(self):
        stored = stored_enclosure(heating="Ceramic", humidity="60%")

        rebuilt = ENCLOSURE_MAPPER.to_entity(ENCLOSURE_MAPPER.to_dto(stored))

        for name in ("owner_id", "name", "type", "substrate", "heating", "humidity", "notes"):
            assert getattr(rebuilt, name) == getattr(stored, name)
        assert rebuilt.created_at is None

    def test_builds_one_record_per_dto(self):
        entities = ENCLOSURE_MAPPER.to_entities(
            [EnclosureDto(name="A", type=EnclosureType.CUSTOM), EnclosureDto(name="B", type=EnclosureType.CUSTOM)]
        )
        assert [e.name for e in entities] == ["A", "B"]
        assert all(isinstance(e, Enclosure) for e in entities)


class TestApplyUpdate:
    def test_required_none_keeps_stored_value(self):
        entity = stored_enclosure()
        ENCLOSURE_MAPPER.apply_update(EnclosureDto(id=3, name=None, type=None), entity)

        assert entity.name == "Tank-1"
        assert entity.type == EnclosureType.TERRARIUM

    def test_optional_none_clears_stored_value(self):
        entity = stored_enclosure()
        ENCLOSURE_MAPPER.apply_update(EnclosureDto(id=3, notes=None, substrate="Sand"), entity)

        assert entity.notes is None
        assert entity.substrate == "Sand"

    def test_identity_and_audit_fields_untouched(self):
        entity = stored_enclosure()
        ENCLOSURE_MAPPER.apply_update(
            EnclosureDto(id=99, name="Renamed", created_by="mallory", updated_by="mallory"),
            entity,
        )

        assert entity.id == 3
        assert entity.name == "Renamed"
        assert entity.created_by == "alice"
        assert entity.updated_by == "alice"

    @given(
        name=st.one_of(st.none(), st.text(min_size=1, max_size=40)),
        notes=st.one_of(st.none(), st.text(max_size=80)),
    )
    def test_required_fields_never_become_null(self, name, notes):
        entity = stored_enclosure()
        ENCLOSURE_MAPPER.apply_update(EnclosureDto(id=3, name=name, notes=notes), entity)

        assert entity.name == (name if name is not None else "Tank-1")
        assert entity.notes == notes


class TestMapperConfiguration:
    def test_rejects_audit_field_in_update_policy(self):
        with pytest.raises(ValueError, match="identity or audit"):
            EntityMapper(Enclosure, EnclosureDto, optional_fields=("created_by",))

    def test_rejects_identity_in_update_policy(self):
        with pytest.raises(ValueError, match="identity or audit"):
            EntityMapper(Enclosure, EnclosureDto, required_fields=("id",))

    def test_rejects_field_in_both_policies(self):
        with pytest.raises(ValueError, match="both required and optional"):
            EntityMapper(Enclosure, EnclosureDto, required_fields=("name",), optional_fields=("name",))

    def test_rejects_field_unknown_to_record_or_dto(self):
        with pytest.raises(ValueError, match="not shared"):
            EntityMapper(ReptileImage, ReptileImageDto, optional_fields=("colour",))

    def test_missing_required_skips_columns_with_defaults(self):
        dto = EnclosureDto(notes="no name, no type")
        assert ENCLOSURE_MAPPER.missing_required(dto) == ["name", "type"]
