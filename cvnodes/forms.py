"""
Command forms for the CV tree.

Every write request body is bound to one of these forms.  Field names
are the camelCase keys of the JSON API, so a form's errors can be
reported back to the client as-is.

Creation is a closed set of variants, one per ``NodeType``.  All of them
share the positional and labelling fields of ``CreateNodeCommand`` and
add their own payload, which ends up in the node's ``attributes``.
Updates go through the single ``UpdateNodeCommand``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type

from django import forms
from django.core.exceptions import ImproperlyConfigured
from django.core.validators import RegexValidator

from .models import NodeType

SHARED_FIELDS = ("id", "parentId", "label", "description", "positionX", "positionY")


class StringListField(forms.JSONField):
    """An ordered list of strings given as a JSON array.

    Only ``None`` counts as empty, so an empty list is kept as a value.
    """

    empty_values = [None]
    default_error_messages = {"invalid_list": "Enter a list of strings."}

    def to_python(self, value):
        value = super().to_python(value)
        if value is None:
            return None
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise forms.ValidationError(self.error_messages["invalid_list"], code="invalid_list")
        return value


class AttributesField(forms.JSONField):
    """A JSON object with arbitrary keys."""

    default_error_messages = {"invalid_object": "Enter a JSON object."}

    def to_python(self, value):
        value = super().to_python(value)
        if value is None:
            return None
        if not isinstance(value, dict):
            raise forms.ValidationError(self.error_messages["invalid_object"], code="invalid_object")
        return value


def _optional_text(**kwargs) -> forms.CharField:
    return forms.CharField(required=False, empty_value=None, **kwargs)


def _payload_text(**kwargs) -> forms.CharField:
    return forms.CharField(required=False, empty_value="", **kwargs)


def _is_present(form: forms.Form, name: str) -> bool:
    """Whether ``name`` was sent with a non-null value and cleaned to one."""
    return form.data.get(name) is not None and form.cleaned_data.get(name) is not None


class CreateNodeCommand(forms.Form):
    """Fields shared by every creation command.

    Subclasses set ``node_type`` and ``slug`` (the URL segment used to
    create that kind of node) and declare their payload fields.
    """

    node_type: str = ""
    slug: str = ""

    id = forms.CharField(
        max_length=50,
        validators=[
            RegexValidator(r"/", inverse_match=True, message="Node ids cannot contain '/'.")
        ],
    )
    parentId = _optional_text(max_length=50)  # noqa: N815
    label = forms.CharField(max_length=255)
    description = _optional_text()
    positionX = forms.IntegerField(required=False)  # noqa: N815
    positionY = forms.IntegerField(required=False)  # noqa: N815

    def attributes(self) -> Optional[Dict[str, Any]]:
        """Return the variant payload of a valid form, without null values.

        Fields that were not sent, or were sent as null, are left out;
        empty strings and empty lists are kept.  ``None`` is returned when
        nothing is left, so that "no extra data" is stored as a missing
        attribute map rather than an empty one.
        """
        payload = {
            name: self.cleaned_data[name]
            for name in self.fields
            if name not in SHARED_FIELDS and _is_present(self, name)
        }
        return payload or None


class CreateProfileCommand(CreateNodeCommand):
    node_type = NodeType.PROFILE
    slug = "profile"

    name = forms.CharField()
    title = forms.CharField()
    subtitle = _payload_text()
    experience = _payload_text()
    email = _payload_text()
    location = _payload_text()
    photoUrl = _payload_text()  # noqa: N815


class CreateCategoryCommand(CreateNodeCommand):
    node_type = NodeType.CATEGORY
    slug = "category"

    sectionId = forms.CharField()  # noqa: N815


class CreateItemCommand(CreateNodeCommand):
    node_type = NodeType.ITEM
    slug = "item"

    company = _payload_text()
    dateRange = _payload_text()  # noqa: N815
    location = _payload_text()
    highlights = StringListField(required=False)
    technologies = StringListField(required=False)


class CreateSkillGroupCommand(CreateNodeCommand):
    node_type = NodeType.SKILL_GROUP
    slug = "skill-group"

    proficiencyLevel = _payload_text()  # noqa: N815


class CreateSkillCommand(CreateNodeCommand):
    node_type = NodeType.SKILL
    slug = "skill"

    proficiencyLevel = _payload_text()  # noqa: N815
    yearsOfExperience = forms.IntegerField(required=False, min_value=0)  # noqa: N815


CREATE_COMMANDS: Dict[str, Type[CreateNodeCommand]] = {
    command.node_type: command
    for command in (
        CreateProfileCommand,
        CreateCategoryCommand,
        CreateItemCommand,
        CreateSkillGroupCommand,
        CreateSkillCommand,
    )
}

if set(CREATE_COMMANDS) != set(NodeType.values):
    raise ImproperlyConfigured(
        "Every node type needs exactly one creation command; "
        f"missing {sorted(set(NodeType.values) - set(CREATE_COMMANDS))}"
    )

COMMANDS_BY_SLUG: Dict[str, Type[CreateNodeCommand]] = {
    command.slug: command for command in CREATE_COMMANDS.values()
}


def command_for_slug(slug: str) -> Optional[Type[CreateNodeCommand]]:
    """Return the creation command registered under a URL slug."""
    return COMMANDS_BY_SLUG.get(slug)


class UpdateNodeCommand(forms.Form):
    """Partial update of an existing node.

    Only ``id`` is required.  Fields that are absent or null leave the
    node unchanged; an empty ``description`` clears it.  ``label`` may be
    omitted but never blanked.
    """

    id = forms.CharField(max_length=50)
    parentId = _optional_text(max_length=50)  # noqa: N815
    label = _optional_text(max_length=255)
    description = _payload_text()
    attributes = AttributesField(required=False)
    positionX = forms.IntegerField(required=False)  # noqa: N815
    positionY = forms.IntegerField(required=False)  # noqa: N815

    def clean_label(self):
        label = self.cleaned_data["label"]
        if label is None and self.data.get("label") is not None:
            raise forms.ValidationError("Label cannot be blank.", code="blank")
        return label

    def changes(self) -> Dict[str, Any]:
        """Return the fields of a valid form that were sent with a value."""
        return {
            name: self.cleaned_data[name]
            for name in self.fields
            if name != "id" and _is_present(self, name)
        }
