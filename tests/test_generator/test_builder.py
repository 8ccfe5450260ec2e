"""Tests for specwrap.generator.builder."""

from __future__ import annotations

from typing import Any

import pytest

from specwrap.exceptions import InvalidBaseUriError, InvalidModuleNameError, InvalidSpecError
from specwrap.generator.builder import (
    build_module,
    module_name_from_title,
    validate_base_url,
    validate_module_name,
)
from specwrap.models import EnhancementLevel, GlobalConfig, HTTPMethod, ParameterLocation


def _spec(paths: dict[str, Any]) -> dict[str, Any]:
    return {"openapi": "3.0.0", "info": {"title": "Sample", "version": "1"}, "paths": paths}


# ---------------------------------------------------------------------------
# build_module
# ---------------------------------------------------------------------------


class TestBuildModulePetstore:
    """End-to-end model for the OpenAPI 3.0 fixture."""

    def test_module_metadata(self, petstore_spec: dict[str, Any]) -> None:
        module = build_module(petstore_spec, level=EnhancementLevel.ADVANCED)
        assert module.name == "petstore_api"
        assert module.base_url == "https://eu.petstore.example.com/v1"
        assert module.level == EnhancementLevel.ADVANCED
        assert module.spec_version == "3.0.3"
        assert module.info.version == "1.2.0"
        assert module.diagnostics == []

    def test_function_names(self, petstore_spec: dict[str, Any]) -> None:
        module = build_module(petstore_spec)
        assert [f.name for f in module.functions] == [
            "GetPetsList",
            "NewPets",
            "GetPets",
            "SetPets",
            "RemovePets",
        ]
        assert [f.python_name for f in module.functions] == [
            "get_pets_list",
            "new_pets",
            "get_pets",
            "set_pets",
            "remove_pets",
        ]

    def test_function_details(self, petstore_spec: dict[str, Any]) -> None:
        functions = {f.python_name: f for f in build_module(petstore_spec).functions}

        listed = functions["get_pets_list"]
        assert listed.http_method == HTTPMethod.GET
        assert listed.path_template == "/pets"
        assert listed.operation_id == "listPets"
        assert listed.tags == ["pets"]
        assert listed.summary == "List all pets"
        assert not listed.has_body

        assert functions["new_pets"].has_body
        assert functions["set_pets"].has_body
        assert functions["remove_pets"].deprecated
        assert functions["remove_pets"].description == "Delete a pet"

    def test_base_url_override(self, petstore_spec: dict[str, Any]) -> None:
        module = build_module(petstore_spec, base_url="http://localhost:8080/")
        assert module.base_url == "http://localhost:8080"
        base = module.functions[0].parameters_in(ParameterLocation.STANDARD)[0]
        assert base.default == "http://localhost:8080"

    def test_explicit_module_name(self, petstore_spec: dict[str, Any]) -> None:
        assert build_module(petstore_spec, module_name="pets").name == "pets"

    def test_deterministic(self, petstore_spec: dict[str, Any]) -> None:
        assert build_module(petstore_spec) == build_module(petstore_spec)


class TestBuildModuleSwagger:
    """Swagger 2.0 fixture, including a name collision."""

    def test_names_and_collision(self, swagger_spec: dict[str, Any]) -> None:
        module = build_module(swagger_spec)
        assert [f.name for f in module.functions] == [
            "SearchUsers",
            "NewUsers",
            "NewImport",
            "UpdateRoles",
        ]
        assert module.name == "user_service"
        assert module.base_url == "http://users.example.com/api"

    def test_same_operation_id_on_same_noun_collides(self) -> None:
        spec = _spec({
            "/user": {"post": {"operationId": "createUser"}},
            "/v2/user": {"post": {"operationId": "createUser"}},
        })
        names = [f.name for f in build_module(spec).functions]
        assert names == ["NewUser", "NewUser1"]

    def test_unique_python_names(self, swagger_spec: dict[str, Any]) -> None:
        names = [f.python_name for f in build_module(swagger_spec).functions]
        assert len(names) == len(set(names))


class TestBuildModuleEdgeCases:
    """Unresolved references, relative servers, configuration."""

    def test_unresolved_references_do_not_abort(self, refs_spec: dict[str, Any]) -> None:
        module = build_module(refs_spec)
        assert [f.python_name for f in module.functions] == ["get_orders_list", "get_items"]
        assert len(module.diagnostics) == 3
        assert module.name == "reference_edge_cases"
        assert module.base_url == "/relative/v2"

    def test_query_cap_from_config(self) -> None:
        params = [{"name": f"q{i:02d}", "in": "query"} for i in range(30)]
        spec = _spec({"/search": {"get": {"parameters": params}}})

        module = build_module(spec)
        query = module.functions[0].parameters_in(ParameterLocation.QUERY)
        assert [p.safe_name for p in query] == [f"q{i:02d}" for i in range(20)]

        module = build_module(spec, config=GlobalConfig(query_param_cap=5))
        assert len(module.functions[0].parameters_in(ParameterLocation.QUERY)) == 5

    def test_custom_auth_header(self) -> None:
        spec = _spec({"/a": {"get": {}}})
        module = build_module(spec, config=GlobalConfig(auth_header="Authorization"))
        token = next(p for p in module.functions[0].parameters if p.safe_name == "auth_token")
        assert token.original_name == "Authorization"

    def test_custom_verb_synonyms(self) -> None:
        spec = _spec({"/pets": {"post": {"operationId": "adoptPet"}}})
        assert build_module(spec).functions[0].name == "NewPets"
        config = GlobalConfig(verb_synonyms={"adopt": "Add"})
        assert build_module(spec, config=config).functions[0].name == "AddPets"

    def test_fallback_descriptions(self) -> None:
        function = build_module(_spec({"/ping": {"head": {}}})).functions[0]
        assert function.name == "InvokePing"
        assert function.summary == "HEAD /ping"
        assert function.description == "Calls HEAD /ping."

    def test_empty_paths(self) -> None:
        assert build_module(_spec({})).functions == []

    def test_invalid_spec(self) -> None:
        with pytest.raises(InvalidSpecError):
            build_module({"info": {}, "paths": {}})

    def test_invalid_module_name(self, petstore_spec: dict[str, Any]) -> None:
        with pytest.raises(InvalidModuleNameError):
            build_module(petstore_spec, module_name="1bad")

    def test_invalid_base_url(self, petstore_spec: dict[str, Any]) -> None:
        with pytest.raises(InvalidBaseUriError):
            build_module(petstore_spec, base_url="ftp://files.example.com")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestModuleNames:
    """Module name derivation and validation."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Petstore API", "petstore_api"),
            ("3D Printing Service!", "api_3d_printing_service"),
            ("  ", "generated_api"),
            ("Import", "import_api"),
        ],
    )
    def test_from_title(self, title: str, expected: str) -> None:
        assert module_name_from_title(title) == expected

    @pytest.mark.parametrize("name", ["pets", "_private", "api_v2", " padded "])
    def test_valid_names(self, name: str) -> None:
        assert validate_module_name(name) == name.strip()

    @pytest.mark.parametrize("name", ["", "1api", "my-api", "class", "a b"])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(InvalidModuleNameError):
            validate_module_name(name)


class TestValidateBaseUrl:
    """Absolute http(s) URLs only."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://api.example.com", "https://api.example.com"),
            ("http://localhost:8000/v1/", "http://localhost:8000/v1"),
        ],
    )
    def test_valid(self, url: str, expected: str) -> None:
        assert validate_base_url(url) == expected

    @pytest.mark.parametrize("url", ["api.example.com", "/v1", "ftp://x.example", "https://"])
    def test_invalid(self, url: str) -> None:
        with pytest.raises(InvalidBaseUriError):
            validate_base_url(url)
