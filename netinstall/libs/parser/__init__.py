"""Group document parser package."""

from netinstall.libs.parser.group_document import explain_yaml_error, parse_group_document

__all__ = ["parse_group_document", "explain_yaml_error"]
