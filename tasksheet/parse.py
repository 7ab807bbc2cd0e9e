"""
Task sequence XML parser.

Turns a task sequence export into an immutable tree of Group/Step nodes.

Expected shape:

    <sequence>
      <group name="Install" disable="false">
        <condition>
          <operator type="and">
            <expression type="SMS_TaskSequence_VariableConditionExpression">
              <variable name="Variable">_SMSTSInWinPE</variable>
              <variable name="Operator">equals</variable>
              <variable name="Value">false</variable>
            </expression>
          </operator>
        </condition>
        <step name="Restart" type="SMS_TaskSequence_RebootAction" continueOnError="true">
          <defaultVarList>
            <variable name="SMSRebootMessage" property="Message">Restarting</variable>
          </defaultVarList>
        </step>
      </group>
    </sequence>
"""

import logging

import defusedxml
from defusedxml import ElementTree  # type: ignore[import-untyped]

from tasksheet.exceptions import MalformedInputError
from tasksheet.models import (
    Condition,
    Expression,
    ExpressionKind,
    Group,
    Node,
    Operator,
    Step,
    Variable,
)

logger = logging.getLogger(__name__)

NODE_TAGS = ("group", "step")


def parse_document(xml: str | bytes, source: str = None):
    """
    Parse XML text and return the element holding the sequence.

    Args:
        xml: XML document text
        source: Optional description of where the XML came from (for errors)

    Returns:
        The ``sequence`` element if present, else the document element

    Raises:
        MalformedInputError: If the XML cannot be parsed
    """
    if isinstance(xml, str):
        xml = xml.lstrip("\ufeff")
    if not xml or not xml.strip():
        raise MalformedInputError("document is empty", source)

    try:
        document = ElementTree.fromstring(xml)
    except ElementTree.ParseError as e:
        raise MalformedInputError(f"XML parse error: {e}", source) from e
    except defusedxml.DefusedXmlException as e:
        raise MalformedInputError(f"forbidden XML construct: {e}", source) from e

    if document.tag == "sequence":
        return document
    sequence = document.find(".//sequence")
    return sequence if sequence is not None else document


def parse_sequence(xml: str | bytes, name: str = "", source: str = None) -> Group:
    """
    Parse a task sequence XML document into a root Group.

    The root group holds the top-level groups and steps; it is never
    rendered itself.

    Raises:
        MalformedInputError: If the XML is unparsable or has no group/step children
    """
    element = parse_document(xml, source)
    children = tuple(_parse_node(child) for child in element if child.tag in NODE_TAGS)
    if not children:
        raise MalformedInputError(
            f"<{element.tag}> has no <group> or <step> children", source
        )

    logger.debug(f"Parsed {len(children)} top-level node(s) from <{element.tag}>")
    return Group(name=name, children=children)


def parse_bool(value: str | None) -> bool:
    """Task sequence booleans are the literal text 'true'."""
    return (value or "").strip().lower() == "true"


def _parse_node(element) -> Node:
    if element.tag == "group":
        return _parse_group(element)
    return _parse_step(element)


def _parse_group(element) -> Group:
    children = tuple(_parse_node(child) for child in element if child.tag in NODE_TAGS)
    return Group(
        name=element.get("name", ""),
        description=element.get("description", ""),
        disabled=parse_bool(element.get("disable")),
        condition=parse_condition(element.find("condition")),
        children=children,
    )


def _parse_step(element) -> Step:
    variables = tuple(
        Variable(
            name=var.get("property") or var.get("name", ""),
            value=var.text or "",
        )
        for var in element.findall("defaultVarList/variable")
    )
    return Step(
        name=element.get("name", ""),
        action_type=element.get("type", ""),
        description=element.get("description", ""),
        disabled=parse_bool(element.get("disable")),
        continue_on_error=parse_bool(element.get("continueOnError")),
        condition=parse_condition(element.find("condition")),
        variables=variables,
    )


def parse_condition(element) -> Condition | None:
    """
    Parse a ``<condition>`` element.

    Several top-level tests are combined with an implicit AND, which is how
    the task sequence engine evaluates them.
    """
    if element is None:
        return None

    parts = [_parse_condition_part(child) for child in element]
    parts = [part for part in parts if part is not None]
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    return Operator(kind="and", children=tuple(parts))


def _parse_condition_part(element) -> Condition | None:
    if element.tag == "operator":
        children = tuple(
            part
            for part in (_parse_condition_part(child) for child in element)
            if part is not None
        )
        return Operator(kind=element.get("type", ""), children=children)

    if element.tag == "expression":
        raw_type = element.get("type", "")
        fields = {
            var.get("name"): (var.text or "")
            for var in element.findall("variable")
            if var.get("name")
        }
        return Expression(
            kind=ExpressionKind.from_type(raw_type), raw_type=raw_type, fields=fields
        )

    logger.debug(f"Ignoring unexpected condition element <{element.tag}>")
    return None
