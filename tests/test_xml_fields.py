"""
Unit tests for the tolerant XML field extraction helpers.

Samples mirror the shapes returned by the UKG SOAP services, with and
without namespace prefixes.
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.xml_fields import (
    capitalize_field,
    extract_all_blocks,
    extract_block,
    extract_field,
    extract_first_field,
    extract_leaf_fields,
    is_unsuccessful,
)


# =============================================================================
# Sample Documents
# =============================================================================

NAMESPACED_RESULT = """
<GetSsoUserByClientUserNameResult xmlns:b="http://www.ultipro.com/contracts" xmlns:i="http://www.w3.org/2001/XMLSchema-instance">
  <b:OperationMessages/>
  <b:Success>true</b:Success>
  <b:Results>
    <b:ClientUserName>john.doe@example.com</b:ClientUserName>
    <b:EmployeeIdentifier i:type="b:EmployeeNumberIdentifier">
      <b:CompanyCode>BPML</b:CompanyCode>
      <b:EmployeeNumber> 100624 </b:EmployeeNumber>
    </b:EmployeeIdentifier>
    <b:FirstName>John</b:FirstName>
  </b:Results>
</GetSsoUserByClientUserNameResult>
"""

BARE_RESULT = """
<GetSsoUserByClientUserNameResult>
  <OperationMessages/>
  <Success>true</Success>
  <Results>
    <ClientUserName>john.doe@example.com</ClientUserName>
    <EmployeeIdentifier type="EmployeeNumberIdentifier">
      <CompanyCode>BPML</CompanyCode>
      <EmployeeNumber> 100624 </EmployeeNumber>
    </EmployeeIdentifier>
    <FirstName>John</FirstName>
  </Results>
</GetSsoUserByClientUserNameResult>
"""


# =============================================================================
# extract_field
# =============================================================================

class TestExtractField:
    """Test single-field extraction."""

    def test_extracts_namespaced_field(self):
        assert extract_field(NAMESPACED_RESULT, "companyCode") == "BPML"

    def test_extracts_bare_field(self):
        assert extract_field(BARE_RESULT, "companyCode") == "BPML"

    @pytest.mark.parametrize("field_name", [
        "companyCode", "employeeNumber", "clientUserName", "firstName", "success",
    ])
    def test_namespaced_and_bare_documents_agree(self, field_name):
        """Documents differing only in prefixes must give identical results."""
        assert extract_field(NAMESPACED_RESULT, field_name) == extract_field(BARE_RESULT, field_name)

    def test_trims_whitespace(self):
        assert extract_field(NAMESPACED_RESULT, "employeeNumber") == "100624"

    def test_missing_field_returns_none(self):
        assert extract_field(NAMESPACED_RESULT, "terminationDate") is None

    def test_matches_case_insensitively(self):
        assert extract_field("<b:EMPLOYEENUMBER>42</b:EMPLOYEENUMBER>", "employeeNumber") == "42"

    def test_capitalizes_field_name(self):
        assert extract_field("<Token>abc</Token>", "token") == "abc"

    def test_arbitrary_prefix(self):
        assert extract_field("<ns7:JobTitle>Analyst</ns7:JobTitle>", "jobTitle") == "Analyst"

    def test_namespaced_form_wins_over_bare(self):
        xml = "<Status>bare</Status><b:Status>prefixed</b:Status>"
        assert extract_field(xml, "status") == "prefixed"

    def test_first_occurrence_wins(self):
        xml = "<b:Status>first</b:Status><b:Status>second</b:Status>"
        assert extract_field(xml, "status") == "first"

    def test_does_not_match_longer_element_names(self):
        xml = "<b:EmploymentStatus>A</b:EmploymentStatus><b:StatusCode>X</b:StatusCode>"
        assert extract_field(xml, "status") is None

    def test_allows_attributes_on_open_tag(self):
        assert extract_field('<Token xmlns="urn:x">abc</Token>', "Token") == "abc"

    def test_self_closing_element_is_absent(self):
        xml = '<b:TerminationDate i:nil="true"/><b:Other>x</b:Other>'
        assert extract_field(xml, "terminationDate") is None

    def test_empty_value_is_absent(self):
        assert extract_field("<b:JobTitle>   </b:JobTitle>", "jobTitle") is None

    def test_element_with_children_is_absent(self):
        xml = "<b:Results><b:Item>x</b:Item></b:Results>"
        assert extract_field(xml, "results") is None

    def test_mismatched_prefixes_do_not_match(self):
        assert extract_field("<b:Token>abc</c:Token>", "token") is None

    @pytest.mark.parametrize("malformed", [
        "<b:Token>abc",
        "<<<>>>",
        "</b:Token>abc<b:Token>",
        "<b:Token abc</b:Token>",
        "",
        "not xml at all",
    ])
    def test_malformed_input_is_absent(self, malformed):
        assert extract_field(malformed, "token") is None

    def test_non_text_input_is_absent(self):
        assert extract_field(None, "token") is None
        assert extract_field(b"<Token>abc</Token>", "token") is None

    def test_regex_metacharacters_in_name_are_literal(self):
        assert extract_field("<b:Token>abc</b:Token>", "T.ken") is None


class TestExtractFirstField:
    """Test synonym chains."""

    def test_returns_first_available_synonym(self):
        xml = "<b:GivenName>Jon</b:GivenName><b:FirstNm>J</b:FirstNm>"
        assert extract_first_field(xml, "firstName", "givenName", "firstNm") == "Jon"

    def test_returns_none_when_no_synonym_matches(self):
        assert extract_first_field("<b:X>1</b:X>", "firstName", "givenName") is None


# =============================================================================
# extract_block / extract_all_blocks
# =============================================================================

class TestExtractBlock:
    """Test sub-document extraction."""

    def test_extracts_namespaced_block_across_lines(self):
        block = extract_block(NAMESPACED_RESULT, "EmployeeIdentifier")
        assert "<b:CompanyCode>BPML</b:CompanyCode>" in block
        assert "<b:EmployeeNumber>" in block

    def test_extracts_bare_block_with_attributes(self):
        block = extract_block(NAMESPACED_RESULT, "GetSsoUserByClientUserNameResult")
        assert "<b:Results>" in block

    def test_missing_block_returns_none(self):
        assert extract_block(NAMESPACED_RESULT, "EmploymentInformation") is None

    def test_does_not_match_prefix_of_longer_name(self):
        xml = "<b:EmployeeEmploymentInformation>x</b:EmployeeEmploymentInformation>"
        assert extract_block(xml, "EmploymentInformation") is None

    def test_nested_same_name_is_not_supported(self):
        """Non-greedy matching stops at the first close tag."""
        xml = "<b:Item><b:Item>inner</b:Item>tail</b:Item>"
        assert extract_block(xml, "Item") == "<b:Item>inner"

    def test_non_text_input_returns_none(self):
        assert extract_block(None, "Results") is None


class TestExtractAllBlocks:
    """Test repeated block enumeration."""

    def test_returns_blocks_in_document_order(self):
        xml = (
            "<b:SsoUser><b:Id>1</b:Id></b:SsoUser>"
            "<SsoUser><Id>2</Id></SsoUser>"
            "<c:SsoUser><c:Id>3</c:Id></c:SsoUser>"
        )
        blocks = extract_all_blocks(xml, "SsoUser")
        assert [extract_field(b, "id") for b in blocks] == ["1", "2", "3"]

    def test_ignores_container_with_longer_name(self):
        xml = "<b:SsoUsers><b:SsoUser><b:Id>1</b:Id></b:SsoUser></b:SsoUsers>"
        assert extract_all_blocks(xml, "SsoUser") == ["<b:Id>1</b:Id>"]

    def test_returns_empty_list_when_absent(self):
        assert extract_all_blocks(NAMESPACED_RESULT, "SsoUser") == []
        assert extract_all_blocks(None, "SsoUser") == []


# =============================================================================
# Helpers
# =============================================================================

class TestHelpers:
    """Test leaf field collection, success flags and capitalization."""

    def test_extract_leaf_fields_first_occurrence_wins(self):
        xml = "<b:A>1</b:A><b:B> 2 </b:B><b:A>3</b:A><c:Empty></c:Empty><b:Nil i:nil=\"true\"/>"
        assert extract_leaf_fields(xml) == {"A": "1", "B": "2"}

    def test_extract_leaf_fields_skips_containers(self):
        xml = "<b:Outer><b:Inner>v</b:Inner></b:Outer>"
        assert extract_leaf_fields(xml) == {"Inner": "v"}

    def test_extract_leaf_fields_on_non_text(self):
        assert extract_leaf_fields(None) == {}

    def test_is_unsuccessful(self):
        assert is_unsuccessful("<b:Success>false</b:Success>") is True
        assert is_unsuccessful("<b:Success>true</b:Success>") is False
        assert is_unsuccessful("<Success>True</Success>") is False
        assert is_unsuccessful("<b:Results/>") is False

    def test_capitalize_field(self):
        assert capitalize_field("companyCode") == "CompanyCode"
        assert capitalize_field("Token") == "Token"
        assert capitalize_field("") == ""
