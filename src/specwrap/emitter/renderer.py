"""Render a :class:`~specwrap.models.ModuleDescriptor` to Python source files.

The emission pipeline:

1. Every :class:`~specwrap.models.FunctionDescriptor` is composed for the
   module's enhancement level (:func:`~specwrap.generator.composer.compose`).
2. Each composed spec is turned into a :class:`FunctionView`, a flat,
   template-ready record holding signature entries, validation calls and the
   request arguments.
3. A Jinja2 environment renders the views through the templates in
   ``emitter/templates/``.
4. Up to ``split_threshold`` functions go into one ``<module>.py``. Larger
   APIs become a package ``<module>/`` with an ``__init__.py`` re-exporting
   from ``_operations_<n>.py`` chunks and a shared ``_settings.py``.

Rendering is pure (``render_module`` returns ``{relative_path: source}``);
:func:`emit_module` performs the atomic writes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from specwrap import __version__
from specwrap.config import atomic_write
from specwrap.generator.composer import ExecutableFunctionSpec, compose
from specwrap.generator.param_mapper import PYTHON_ANNOTATIONS
from specwrap.models import (
    EnhancementLevel,
    GlobalConfig,
    ModuleDescriptor,
    ParameterDescriptor,
    ParameterLocation,
)

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``emitter/templates/``)."""

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class ArgumentView:
    """One entry of a generated signature."""

    name: str
    annotation: str
    default: Optional[str]
    description: str
    original_name: str
    validation: Optional[str] = None
    collection_format: Optional[str] = None

    @property
    def value(self) -> str:
        """Source expression passed to the runtime for this argument."""
        if self.collection_format is None:
            return self.name
        return f"_runtime.join_collection({self.name}, {self.collection_format!r})"


@dataclass
class FunctionView:
    """Template context for one generated callable."""

    name: str
    pascal_name: str
    method: str
    path: str
    summary: str
    description: str
    deprecated: bool
    positional: list[ArgumentView] = field(default_factory=list)
    keyword: list[ArgumentView] = field(default_factory=list)
    path_params: list[ArgumentView] = field(default_factory=list)
    query_params: list[ArgumentView] = field(default_factory=list)
    has_body: bool = False
    uses_timeout: bool = False
    uses_retry: bool = False
    notes: list[str] = field(default_factory=list)

    @property
    def arguments(self) -> list[ArgumentView]:
        return self.positional + self.keyword

    @property
    def validations(self) -> list[str]:
        return [arg.validation for arg in self.arguments if arg.validation]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_module(
    module: ModuleDescriptor, config: Optional[GlobalConfig] = None
) -> dict[str, str]:
    """Render *module* to source text without touching the filesystem.

    Args:
        module: The fully built module model.
        config: Supplies ``split_threshold``, ``auth_header``,
            ``query_param_cap`` and the retry settings baked into the code.

    Returns:
        Mapping of POSIX-style relative path to file content:
        ``{"<name>.py": ...}`` or, above the split threshold,
        ``{"<name>/__init__.py": ..., "<name>/_settings.py": ...,
        "<name>/_operations_1.py": ..., ...}``.
    """
    config = config or GlobalConfig()
    env = create_jinja_env()
    views = [build_function_view(compose(fn, module.level)) for fn in module.functions]
    context = _module_context(module, config)

    if len(views) <= config.split_threshold:
        source = env.get_template("module.py.j2").render(functions=views, **context)
        return {f"{module.name}.py": source}

    files: dict[str, str] = {}
    chunks = [
        views[start : start + config.split_threshold]
        for start in range(0, len(views), config.split_threshold)
    ]
    chunk_names: list[tuple[str, list[FunctionView]]] = []
    for index, chunk in enumerate(chunks, start=1):
        chunk_module = f"_operations_{index}"
        chunk_names.append((chunk_module, chunk))
        files[f"{module.name}/{chunk_module}.py"] = env.get_template("chunk.py.j2").render(
            functions=chunk, chunk_index=index, chunk_count=len(chunks), **context
        )
    files[f"{module.name}/_settings.py"] = env.get_template("settings.py.j2").render(**context)
    files[f"{module.name}/__init__.py"] = env.get_template("package_init.py.j2").render(
        chunks=chunk_names, functions=views, **context
    )
    logger.debug("Split %d functions into %d chunks", len(views), len(chunks))
    return files


def emit_module(
    module: ModuleDescriptor,
    output_dir: str | Path,
    config: Optional[GlobalConfig] = None,
) -> list[Path]:
    """Render *module* and write it below *output_dir*.

    Everything is rendered before the first write, and every write is atomic.

    Returns:
        The written file paths, in render order.
    """
    rendered = render_module(module, config)
    root = Path(output_dir)
    written: list[Path] = []
    for relative, source in rendered.items():
        target = root.joinpath(*relative.split("/"))
        atomic_write(target, source)
        logger.debug("Wrote %s", target)
        written.append(target)
    return written


def create_jinja_env() -> Environment:
    """Create the Jinja2 environment for the code templates.

    Autoescape is off for ``.py.j2`` templates (they produce Python, not
    HTML). Block trimming and lstrip keep template control lines out of the
    output.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("py.j2",), default=False),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["pyrepr"] = repr
    env.filters["docstring"] = docstring_text
    return env


# ---------------------------------------------------------------------------
# View building
# ---------------------------------------------------------------------------


def build_function_view(spec: ExecutableFunctionSpec) -> FunctionView:
    """Flatten a composed function spec into a :class:`FunctionView`."""
    fn = spec.function

    # Path parameters are positional; everything else is keyword-only.
    positional: list[ArgumentView] = []
    keyword: list[ArgumentView] = []
    query: list[ArgumentView] = []
    for param in spec.parameters:
        view = _argument_view(param)
        if param.location == ParameterLocation.PATH:
            positional.append(view)
        else:
            keyword.append(view)
            if param.location == ParameterLocation.QUERY:
                query.append(view)

    return FunctionView(
        name=fn.python_name,
        pascal_name=fn.name,
        method=fn.http_method.value.upper(),
        path=fn.path_template,
        summary=_one_line(fn.summary),
        description=fn.description.strip() if fn.description.strip() != fn.summary.strip() else "",
        deprecated=fn.deprecated,
        positional=positional,
        keyword=keyword,
        path_params=list(positional),
        query_params=query,
        has_body=spec.body_parameter is not None,
        uses_timeout=spec.uses_timeout,
        uses_retry=spec.uses_retry,
        notes=list(spec.notes),
    )


def _argument_view(param: ParameterDescriptor) -> ArgumentView:
    annotation = PYTHON_ANNOTATIONS[param.type]
    default: Optional[str]

    if param.required:
        default = None
    elif param.location == ParameterLocation.QUERY:
        default = "UNSET"
    elif param.safe_name == "base_url":
        default = "BASE_URL"
    elif param.safe_name == "headers":
        annotation = "Optional[dict[str, str]]"
        default = "None"
    elif param.default is None:
        if annotation != "Any":
            annotation = f"Optional[{annotation}]"
        default = "None"
    else:
        default = repr(param.default)

    validation = None
    kwargs = param.constraints.as_kwargs()
    if kwargs:
        rendered = ", ".join(f"{key}={value!r}" for key, value in kwargs.items())
        validation = (
            f"_runtime.validate_argument({param.original_name!r}, {param.safe_name}, {rendered})"
        )

    description = _one_line(param.description) or param.original_name
    if param.location in (ParameterLocation.PATH, ParameterLocation.QUERY):
        if param.original_name != param.safe_name:
            description = f"{description} (sent as '{param.original_name}')"

    return ArgumentView(
        name=param.safe_name,
        annotation=annotation,
        default=default,
        description=description,
        original_name=param.original_name,
        validation=validation,
        collection_format=param.constraints.collection_format,
    )


def _module_context(module: ModuleDescriptor, config: GlobalConfig) -> dict[str, Any]:
    return {
        "module": module,
        "info": module.info,
        "generator_version": __version__,
        "level": module.level.value,
        "base_url": module.base_url,
        "auth_header": config.auth_header,
        "retry_attempts": config.retry_attempts,
        "retry_backoff": config.retry_backoff,
        "query_param_cap": config.query_param_cap,
        "uses_retry": module.level.includes(EnhancementLevel.EXPERT),
        "description": module.info.description.strip(),
        "all_names": [fn.python_name for fn in module.functions],
    }


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def docstring_text(text: str) -> str:
    """Make *text* safe inside a triple-double-quoted docstring."""
    return text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


def _one_line(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()
