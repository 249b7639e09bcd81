"""Renders resolved declarations as Java interfaces."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from ..definitions.parser import parse_definition
from ..errors import EmitterError, MalformedDefinitionError
from ..models import ResolvedDeclaration
from .base import Emitter
from .java_types import accessor_suffix, java_constant, java_string, java_type

DEFAULT_BASE_INTERFACE = "org.ros.internal.message.Message"


class JavaInterfaceEmitter(Emitter):
    """Emits one Java interface per declaration from Jinja2 templates."""

    extension = "java"
    MESSAGE_TEMPLATE = "interface.java.j2"
    SERVICE_TEMPLATE = "service.java.j2"

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        base_interface: str | None = None,
    ) -> None:
        self.templates_dir = templates_dir
        self.base_interface = base_interface or DEFAULT_BASE_INTERFACE
        self._env = self._create_env(templates_dir)

    def emit(self, declaration: ResolvedDeclaration, is_message: bool) -> str:
        context: Dict[str, object] = {
            "package": declaration.package,
            "name": declaration.name,
            "full_name": declaration.full_name,
            "base_interface": self.base_interface,
            "definition_literal": java_string(declaration.text),
            "constants": [],
            "fields": [],
        }
        template_name = self.SERVICE_TEMPLATE
        if is_message:
            template_name = self.MESSAGE_TEMPLATE
            context.update(self._members(declaration))
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except TemplateError as exc:
            raise EmitterError(f"Template {template_name} failed for {declaration.full_name}: {exc}") from exc

    @staticmethod
    def _members(declaration: ResolvedDeclaration) -> Dict[str, List[Dict[str, str]]]:
        try:
            parsed = parse_definition(declaration.definition, declaration.package)
        except MalformedDefinitionError as exc:
            raise EmitterError(f"{declaration.full_name}: {exc}") from exc

        constants = []
        for constant in parsed.constants:
            constant_type, literal = java_constant(constant)
            constants.append({"name": constant.name, "java_type": constant_type, "literal": literal})

        fields = []
        for spec in parsed.fields:
            suffix = accessor_suffix(spec.name)
            fields.append(
                {
                    "name": spec.name,
                    "java_type": java_type(spec.type),
                    "getter": f"get{suffix}",
                    "setter": f"set{suffix}",
                }
            )
        return {"constants": constants, "fields": fields}

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )


__all__ = ["DEFAULT_BASE_INTERFACE", "JavaInterfaceEmitter"]
