"""Tests for specwrap.generator.naming."""

from __future__ import annotations

import pytest

from specwrap.generator.naming import (
    VERB_SYNONYMS,
    NameRegistry,
    derive_name,
    derive_noun,
    derive_verb,
    merge_synonyms,
    to_snake_case,
    tokenize,
)
from specwrap.models import HTTPMethod


class TestTokenize:
    """Identifier splitting."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("createPet", ["create", "Pet"]),
            ("createPetAPIKey", ["create", "Pet", "API", "Key"]),
            ("user-profiles.v2", ["user", "profiles", "v", "2"]),
            ("list_all_pets", ["list", "all", "pets"]),
            ("", []),
        ],
    )
    def test_tokens(self, text: str, expected: list[str]) -> None:
        assert tokenize(text) == expected


class TestDeriveVerb:
    """Verb precedence: operationId, then summary/description, then method."""

    def test_operation_id_first_token(self) -> None:
        assert derive_verb(HTTPMethod.POST, operation_id="createPet") == "New"
        assert derive_verb(HTTPMethod.GET, operation_id="listPets") == "Get"
        assert derive_verb(HTTPMethod.POST, operation_id="searchUsers") == "Search"

    def test_operation_id_beats_summary(self) -> None:
        verb = derive_verb(HTTPMethod.POST, operation_id="deletePet", summary="Create a pet")
        assert verb == "Remove"

    def test_summary_when_operation_id_unknown(self) -> None:
        verb = derive_verb(HTTPMethod.PUT, operation_id="petThing", summary="Replace a pet")
        assert verb == "Set"

    def test_description_searched_after_summary(self) -> None:
        verb = derive_verb(HTTPMethod.POST, summary="Pets", description="Start a feeding")
        assert verb == "Start"

    @pytest.mark.parametrize(
        ("method", "expected"),
        [
            (HTTPMethod.GET, "Get"),
            (HTTPMethod.POST, "New"),
            (HTTPMethod.PUT, "Set"),
            (HTTPMethod.PATCH, "Update"),
            (HTTPMethod.DELETE, "Remove"),
            (HTTPMethod.HEAD, "Invoke"),
            (HTTPMethod.OPTIONS, "Invoke"),
        ],
    )
    def test_method_fallback(self, method: HTTPMethod, expected: str) -> None:
        assert derive_verb(method) == expected

    def test_custom_synonyms(self) -> None:
        synonyms = merge_synonyms({"Adopt": "new"})
        assert derive_verb(HTTPMethod.POST, operation_id="adoptPet", synonyms=synonyms) == "New"
        assert derive_verb(HTTPMethod.PUT, operation_id="adoptPet") == "Set"
        assert derive_verb(HTTPMethod.PUT, operation_id="adoptPet", synonyms=synonyms) == "New"


class TestDeriveNoun:
    """Noun from the last literal path segment."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/pets", "Pets"),
            ("/pets/{petId}", "Pets"),
            ("/users/{id}/api-keys", "ApiKeys"),
            ("/v1/user_profiles", "UserProfiles"),
            ("/{id}", "Resource"),
            ("/", "Resource"),
        ],
    )
    def test_nouns(self, path: str, expected: str) -> None:
        assert derive_noun(path) == expected


class TestDeriveName:
    """Full verb-noun names."""

    @pytest.mark.parametrize(
        ("method", "path", "operation_id", "summary", "expected"),
        [
            (HTTPMethod.GET, "/pets", None, None, "GetPetsList"),
            (HTTPMethod.GET, "/pets/{petId}", None, None, "GetPets"),
            (HTTPMethod.POST, "/pets", None, None, "NewPets"),
            (HTTPMethod.DELETE, "/pets/{petId}", None, None, "RemovePets"),
            (HTTPMethod.PUT, "/pets/{petId}", None, "Replace a pet", "SetPets"),
            (HTTPMethod.GET, "/pets", "showPets", None, "GetPetsList"),
            (HTTPMethod.POST, "/users", "createUser", None, "NewUsers"),
        ],
    )
    def test_names(
        self,
        method: HTTPMethod,
        path: str,
        operation_id: str | None,
        summary: str | None,
        expected: str,
    ) -> None:
        assert derive_name(method, path, operation_id, summary) == expected

    def test_deterministic(self) -> None:
        args = (HTTPMethod.PATCH, "/users/{userId}/roles", "updateUserRoles", "Change roles")
        assert len({derive_name(*args) for _ in range(5)}) == 1


class TestToSnakeCase:
    """PascalCase -> snake_case."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("GetPetsList", "get_pets_list"),
            ("NewUser1", "new_user1"),
            ("GetAPIKeys", "get_api_keys"),
            ("Remove", "remove"),
            ("", "operation"),
        ],
    )
    def test_conversion(self, name: str, expected: str) -> None:
        assert to_snake_case(name) == expected


class TestNameRegistry:
    """Module-wide name uniqueness."""

    def test_collision_suffixes(self) -> None:
        registry = NameRegistry()
        assert [registry.claim("NewUser") for _ in range(3)] == ["NewUser", "NewUser1", "NewUser2"]
        assert len(registry) == 3

    def test_distinct_names_untouched(self) -> None:
        registry = NameRegistry()
        assert registry.claim("GetPets") == "GetPets"
        assert registry.claim("GetPetsList") == "GetPetsList"

    def test_suffix_skips_taken_variant(self) -> None:
        registry = NameRegistry()
        registry.claim("NewUser1")
        assert registry.claim("NewUser") == "NewUser"
        assert registry.claim("NewUser") == "NewUser2"

    def test_contains(self) -> None:
        registry = NameRegistry()
        registry.claim("GetPets")
        assert "GetPets" in registry
        assert "RemovePets" not in registry
        assert 42 not in registry


class TestSynonymTable:
    """The shared table is read-only."""

    def test_immutable(self) -> None:
        with pytest.raises(TypeError):
            VERB_SYNONYMS["adopt"] = "New"  # type: ignore[index]

    def test_merge_does_not_mutate_defaults(self) -> None:
        merged = merge_synonyms({"adopt": "new"})
        assert merged["adopt"] == "New"
        assert "adopt" not in VERB_SYNONYMS

    def test_merge_without_extra_returns_defaults(self) -> None:
        assert merge_synonyms({}) is VERB_SYNONYMS
