"""Tests for encounter_tracker/domain/models/base.py."""

from datetime import datetime, timezone
from uuid import UUID

import pytest
from pydantic import ValidationError

from encounter_tracker.domain.models.base import (
    AuditTracked,
    Capability,
    CommonEntity,
    Entity,
    LookupEntity,
    SoftDeletable,
    capabilities_of,
    is_capability_base,
    validate_entity,
)
from encounter_tracker.domain.models.lookups import BehaviorType
from encounter_tracker.domain.models.personas import Persona
from encounter_tracker.domain.models.social_media import SocialMediaAccountLink


CREATED = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


# --- Entity defaults ---

def test_entity_generates_uuid_id():
    assert isinstance(Persona().id, UUID)


def test_entity_ids_are_unique():
    assert Persona().id != Persona().id


def test_entity_created_at_is_timezone_aware():
    assert Persona().created_at.tzinfo is not None


def test_entity_updated_at_defaults_to_created_at():
    persona = Persona(created_at=CREATED)
    assert persona.updated_at == CREATED


def test_entity_updated_at_kept_when_given():
    later = datetime(2025, 6, 2, tzinfo=timezone.utc)
    assert Persona(created_at=CREATED, updated_at=later).updated_at == later


def test_entity_version_defaults_to_one():
    assert Persona().version == 1


def test_entity_version_below_one_raises():
    with pytest.raises(ValidationError):
        Persona(version=0)


def test_entity_is_frozen():
    persona = Persona(name="Alice")
    with pytest.raises(ValidationError):
        persona.name = "Bob"  # type: ignore[misc]


# --- Capability defaults ---

def test_audit_fields_default_none():
    link = SocialMediaAccountLink(account_id=Persona().id, link="https://example.com")
    assert link.created_by_id is None
    assert link.modified_by_id is None


def test_soft_deletable_defaults_active():
    assert BehaviorType(name="Friendly").is_active is True


def test_lookup_name_required():
    with pytest.raises(ValidationError):
        BehaviorType()  # type: ignore[call-arg]


def test_lookup_name_empty_raises():
    with pytest.raises(ValidationError):
        BehaviorType(name="")


def test_lookup_name_256_chars_valid():
    assert len(BehaviorType(name="x" * 256).name) == 256


def test_lookup_name_257_chars_raises():
    with pytest.raises(ValidationError):
        BehaviorType(name="x" * 257)


# --- capabilities_of ---

def test_capabilities_of_identity_only_entity():
    assert capabilities_of(Persona) == {Capability.IDENTITY}


def test_capabilities_of_common_entity():
    assert capabilities_of(SocialMediaAccountLink) == {
        Capability.IDENTITY,
        Capability.AUDIT_TRACKING,
        Capability.SOFT_DELETE,
        Capability.COMMON,
    }


def test_capabilities_of_lookup_entity_includes_common():
    caps = capabilities_of(BehaviorType)
    assert Capability.LOOKUP in caps
    assert Capability.COMMON in caps


# --- is_capability_base ---

@pytest.mark.parametrize(
    "contract", [Entity, AuditTracked, SoftDeletable, CommonEntity, LookupEntity]
)
def test_contract_classes_are_capability_bases(contract):
    assert is_capability_base(contract) is True


def test_concrete_entity_is_not_capability_base():
    assert is_capability_base(BehaviorType) is False


# --- validate_entity ---

def test_validate_entity_returns_equal_copy():
    persona = Persona(name="Alice")
    assert validate_entity(persona) == persona


def test_validate_entity_rejects_invalid_model_copy():
    # model_copy(update=...) skips validation; validate_entity catches it
    broken = BehaviorType(name="ok").model_copy(update={"name": "x" * 300})
    with pytest.raises(ValidationError):
        validate_entity(broken)


def test_validate_entity_keeps_concrete_type():
    assert type(validate_entity(BehaviorType(name="ok"))) is BehaviorType
