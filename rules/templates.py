"""
Template Manager - Variable substitution for canned replies
===========================================================

This module provides the templates used to build replies. Placeholders
are plain ``{name}`` markers substituted in a single pass, so text that
is echoed back from the user is never expanded a second time.
"""

import re
from typing import Dict, Any, Optional, List
from dataclasses import dataclass

from core.exceptions import RuleError


_PLACEHOLDER = re.compile(r'\{(\w+)\}')


@dataclass
class Template:
    """
    A reply template with ``{variable}`` placeholders.

    Placeholders without a value in the context are left as they are.

    Attributes:
        content (str): Template content with placeholders
        name (str): Optional template name
    """
    content: str
    name: str = ""

    def render(self, context: Optional[Dict[str, Any]] = None) -> str:
        """
        Render the template with context variables.

        Args:
            context: Dictionary of variable values

        Returns:
            Rendered string
        """
        context = context or {}

        def replace(match):
            var_name = match.group(1)
            if var_name in context:
                return str(context[var_name])
            return match.group(0)

        return _PLACEHOLDER.sub(replace, self.content)

    def variables(self) -> List[str]:
        """Placeholder names used by this template, in order of appearance."""
        seen: List[str] = []
        for match in _PLACEHOLDER.finditer(self.content):
            if match.group(1) not in seen:
                seen.append(match.group(1))
        return seen


class TemplateManager:
    """
    Manager for named templates.

    Example:
        manager = TemplateManager()
        manager.add_template("echo", 'You said: "{input}"')
        manager.render("echo", {"input": "hi"})  # You said: "hi"
    """

    def __init__(self, templates: Optional[Dict[str, str]] = None):
        self.templates: Dict[str, Template] = {}
        if templates:
            self.load_from_dict(templates)

    def add_template(self, name: str, content: str) -> None:
        """Add or replace a named template."""
        self.templates[name] = Template(content=content, name=name)

    def get_template(self, name: str) -> Optional[Template]:
        """Get a template by name, or None."""
        return self.templates.get(name)

    def render(self, name: str, context: Optional[Dict[str, Any]] = None) -> str:
        """
        Render a template by name.

        Raises:
            RuleError: If no template with that name exists
        """
        template = self.get_template(name)
        if template is None:
            raise RuleError(f"Unknown template: {name}")
        return template.render(context)

    def has_template(self, name: str) -> bool:
        """Check if template exists."""
        return name in self.templates

    def list_templates(self) -> List[str]:
        """Get list of template names."""
        return list(self.templates.keys())

    def load_from_dict(self, data: Dict[str, str]) -> None:
        """Load templates from a name -> content mapping."""
        for name, content in data.items():
            self.add_template(name, content)
