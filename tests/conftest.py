"""Shared fixtures: the shop model export and builders for small inline documents."""

from pathlib import Path

import pytest

from sparxxmi2uml import parse, read_xmi, read_xmi_string
from sparxxmi2uml.context import ParseContext

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"

XMI_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<xmi:XMI xmi:version="2.5.1" xmlns:uml="http://www.omg.org/spec/UML/20131001" xmlns:xmi="http://www.omg.org/spec/XMI/20131001">
  <uml:Model xmi:type="uml:Model" name="{model_name}">
    {model}
  </uml:Model>
  <xmi:Extension extender="Enterprise Architect" extenderID="6.5">
    {extension}
  </xmi:Extension>
</xmi:XMI>
"""

# Package P holding class A (start) and class B (end) of a plain association.
SCENARIO_MODEL = """
<packagedElement xmi:type="uml:Package" xmi:id="EAPK_P" name="P">
  <packagedElement xmi:type="uml:Class" xmi:id="EAID_A" name="A">
    <ownedAttribute xmi:type="uml:Property" xmi:id="EAID_A_name" name="name" isDerived="false">
      <type xmi:idref="EAID_String"/>
      <lowerValue xmi:type="uml:LiteralInteger" value="1"/>
      <upperValue xmi:type="uml:LiteralUnlimitedNatural" value="1"/>
    </ownedAttribute>
  </packagedElement>
  <packagedElement xmi:type="uml:Class" xmi:id="EAID_B" name="B"/>
  <packagedElement xmi:type="uml:PrimitiveType" xmi:id="EAID_String" name="String"/>
</packagedElement>
"""

SCENARIO_EXTENSION = """
<elements>
  <element xmi:idref="EAID_A" xmi:type="uml:Class" name="A">
    <links><Association xmi:id="EAID_AB" start="EAID_A" end="EAID_B"/></links>
  </element>
  <element xmi:idref="EAID_B" xmi:type="uml:Class" name="B">
    <links><Association xmi:id="EAID_AB" start="EAID_A" end="EAID_B"/></links>
  </element>
</elements>
<connectors>
  <connector xmi:idref="EAID_AB">
    <source xmi:idref="EAID_A">
      <model type="Class" name="A"/>
      <role visibility="Public"/>
      <type multiplicity="1" aggregation="none"/>
    </source>
    <target xmi:idref="EAID_B">
      <model type="Class" name="B"/>
      <role visibility="Public"/>
      <type multiplicity="0..*" aggregation="none"/>
    </target>
  </connector>
</connectors>
"""


def build_xmi(model: str = "", extension: str = "", model_name: str = "EA_Model") -> str:
    return XMI_TEMPLATE.format(model=model, extension=extension, model_name=model_name)


@pytest.fixture
def shop_xmi_path() -> Path:
    return FIXTURES_DIR / "shop_model.xmi"


@pytest.fixture
def shop_inputs(shop_xmi_path):
    return read_xmi(shop_xmi_path)


@pytest.fixture
def shop_document(shop_inputs):
    return parse(*shop_inputs)


@pytest.fixture
def shop_context(shop_inputs) -> ParseContext:
    xmi_model, raw_tree = shop_inputs
    return ParseContext(model=xmi_model, tree=raw_tree)


@pytest.fixture
def scenario_xmi() -> str:
    return build_xmi(SCENARIO_MODEL, SCENARIO_EXTENSION)


@pytest.fixture
def make_context():
    """Build a `ParseContext` from inline model and extension XML."""

    def _make_context(model: str = "", extension: str = "") -> ParseContext:
        xmi_model, raw_tree = read_xmi_string(build_xmi(model, extension))
        return ParseContext(model=xmi_model, tree=raw_tree)

    return _make_context


@pytest.fixture
def xmi_builder():
    """`build_xmi` for tests that assemble their own documents."""
    return build_xmi
