"""
Tests for task sequence XML parsing.
"""

import pytest

from tasksheet.exceptions import MalformedInputError
from tasksheet.models import ExpressionKind, Group, Operator, Step, Variable
from tasksheet.parse import parse_bool, parse_condition, parse_document, parse_sequence


class TestParseDocument:
    """Tests for locating the sequence element."""

    def test_sequence_root(self, simple_xml):
        assert parse_document(simple_xml).tag == "sequence"

    def test_nested_sequence(self):
        xml = "<SmsTaskSequencePackage><Sequence/><sequence><step name='a'/></sequence></SmsTaskSequencePackage>"
        assert parse_document(xml).tag == "sequence"

    def test_falls_back_to_document_element(self):
        assert parse_document("<tasks><step name='a'/></tasks>").tag == "tasks"

    def test_bytes_with_declaration(self):
        xml = b'<?xml version="1.0" encoding="utf-8"?><sequence><step name="a"/></sequence>'
        assert parse_document(xml).tag == "sequence"

    def test_byte_order_mark_is_ignored(self):
        assert parse_document("\ufeff<sequence><step name='a'/></sequence>").tag == "sequence"

    def test_unparsable_xml(self):
        with pytest.raises(MalformedInputError, match="XML parse error"):
            parse_document("<sequence><group>")

    def test_empty_input(self):
        with pytest.raises(MalformedInputError, match="empty"):
            parse_document("   ")

    def test_entity_expansion_is_rejected(self):
        xml = (
            '<?xml version="1.0"?>'
            '<!DOCTYPE lolz [<!ENTITY lol "lol"><!ENTITY lol2 "&lol;&lol;">]>'
            "<sequence><step name='&lol2;'/></sequence>"
        )
        with pytest.raises(MalformedInputError):
            parse_document(xml)

    def test_source_in_message(self):
        with pytest.raises(MalformedInputError, match="deploy.xml"):
            parse_document("<broken", source="deploy.xml")


class TestParseSequence:
    """Tests for building the node tree."""

    def test_simple_tree(self, simple_xml):
        root = parse_sequence(simple_xml, name="Simple")

        assert root.name == "Simple"
        assert len(root.children) == 2
        group, step = root.children
        assert isinstance(group, Group)
        assert group.name == "Setup"
        assert isinstance(step, Step)
        assert step.action_type == "SMS_TaskSequence_RunCommandLineAction"

    def test_fixture_tree(self, sequence_xml):
        root = parse_sequence(sequence_xml)

        install, empty, bitlocker = root.children
        assert install.description == "Lay down the base image"
        assert [child.name for child in install.children] == [
            "Restart in Windows PE",
            "Apply Operating System",
            "Drivers",
        ]
        assert empty.children == ()
        assert bitlocker.description == "Protect the OS volume"

    def test_step_attributes(self, sequence_xml):
        root = parse_sequence(sequence_xml)
        restart, apply_os, drivers = root.children[0].children

        assert restart.continue_on_error is True
        assert restart.disabled is False
        assert apply_os.disabled is True
        assert drivers.disabled is True

    def test_variables_use_property_name(self, sequence_xml):
        restart = parse_sequence(sequence_xml).children[0].children[0]

        assert restart.variables == (
            Variable("Message", "Restarting"),
            Variable("MessageTimeout", "60"),
        )

    def test_variable_name_fallback(self):
        xml = """
        <sequence>
          <step name="a"><defaultVarList><variable name="OSDTimeZone">UTC</variable></defaultVarList></step>
        </sequence>
        """
        step = parse_sequence(xml).children[0]
        assert step.variables == (Variable("OSDTimeZone", "UTC"),)

    def test_non_node_children_are_ignored(self):
        xml = "<sequence><referenceList/><step name='a'><action>cmd</action></step></sequence>"
        root = parse_sequence(xml)
        assert [child.name for child in root.children] == ["a"]

    def test_no_nodes(self):
        with pytest.raises(MalformedInputError, match="no <group> or <step>"):
            parse_sequence("<sequence><referenceList/></sequence>")


class TestParseBool:
    """Tests for boolean attributes."""

    def test_true_values(self):
        assert parse_bool("true") is True
        assert parse_bool("True") is True

    def test_other_values(self):
        assert parse_bool("false") is False
        assert parse_bool("yes") is False
        assert parse_bool("") is False
        assert parse_bool(None) is False


class TestParseCondition:
    """Tests for condition trees."""

    def test_operator_with_expression(self, sequence_xml):
        condition = parse_sequence(sequence_xml).children[0].condition

        assert isinstance(condition, Operator)
        assert condition.kind == "and"
        (expr,) = condition.children
        assert expr.kind is ExpressionKind.VARIABLE
        assert expr.get("Variable") == "_SMSTSInWinPE"
        assert expr.get("Value") == "false"

    def test_single_expression(self, sequence_xml):
        drivers = parse_sequence(sequence_xml).children[0].children[2]
        condition = drivers.children[1].condition

        assert condition.kind is ExpressionKind.FILE
        assert condition.get("Path") == "C:\\Drivers\\install.ps1"

    def test_missing_condition(self, simple_xml):
        assert parse_sequence(simple_xml).children[0].condition is None

    def test_empty_condition(self):
        xml = "<sequence><step name='a'><condition/></step></sequence>"
        assert parse_sequence(xml).children[0].condition is None

    def test_multiple_children_are_combined_with_and(self):
        xml = """
        <sequence><step name="a"><condition>
          <expression type="SMS_TaskSequence_FolderConditionExpression"><variable name="Path">C:\\</variable></expression>
          <expression type="SMS_TaskSequence_FolderConditionExpression"><variable name="Path">D:\\</variable></expression>
        </condition></step></sequence>
        """
        condition = parse_sequence(xml).children[0].condition

        assert isinstance(condition, Operator)
        assert condition.kind == "and"
        assert len(condition.children) == 2

    def test_unknown_expression_type(self):
        xml = """
        <sequence><step name="a"><condition>
          <expression type="SMS_TaskSequence_FutureExpression"/>
        </condition></step></sequence>
        """
        condition = parse_sequence(xml).children[0].condition

        assert condition.kind is ExpressionKind.UNKNOWN
        assert condition.raw_type == "SMS_TaskSequence_FutureExpression"

    def test_none_element(self):
        assert parse_condition(None) is None
