from unittest.mock import patch

from sparxxmi2uml.context import ReferenceCache

CONNECTOR_ONLY_EXTENSION = """
<elements>
  <element xmi:idref="EAID_A" xmi:type="uml:Class" name="A">
    <links><Association xmi:id="EAID_AX" start="EAID_A" end="EAID_External"/></links>
  </element>
</elements>
<connectors>
  <connector xmi:idref="EAID_AX">
    <source xmi:idref="EAID_A"><model type="Class" name="A"/></source>
    <target xmi:idref="EAID_External"><model type="Class" name="ExternalThing"/></target>
  </connector>
</connectors>
"""

MODEL = """
<packagedElement xmi:type="uml:Package" xmi:id="EAPK_P" name="P">
  <packagedElement xmi:type="uml:Class" xmi:id="EAID_A" name="Alpha"/>
</packagedElement>
"""


def test_lookup_by_element_id(make_context):
    ctx = make_context(MODEL, CONNECTOR_ONLY_EXTENSION)

    assert ctx.cache.lookup("EAID_A") == "Alpha"
    assert ctx.cache.lookup("EAPK_P") == "P"


def test_lookup_falls_back_to_connector_model(make_context):
    ctx = make_context(MODEL, CONNECTOR_ONLY_EXTENSION)

    assert ctx.cache.lookup("EAID_External") == "ExternalThing"


def test_lookup_of_unknown_id(make_context):
    ctx = make_context(MODEL, CONNECTOR_ONLY_EXTENSION)

    assert ctx.cache.lookup("EAID_missing") is None
    assert "EAID_missing" in ctx.cache
    assert ctx.cache.lookup(None) is None


def test_lookup_is_memoized(make_context):
    ctx = make_context(MODEL, CONNECTOR_ONLY_EXTENSION)
    cache = ReferenceCache(ctx.tree)

    with patch.object(ctx.tree, "name_by_id", wraps=ctx.tree.name_by_id) as name_by_id:
        assert cache.lookup("EAID_A") == "Alpha"
        assert cache.lookup("EAID_A") == "Alpha"
        assert cache.lookup("EAID_missing") is None
        assert cache.lookup("EAID_missing") is None

    assert name_by_id.call_count == 2
    assert len(cache) == 2


def test_each_context_gets_its_own_cache(make_context):
    first = make_context(MODEL, CONNECTOR_ONLY_EXTENSION)
    second = make_context(MODEL, CONNECTOR_ONLY_EXTENSION)

    first.lookup_name("EAID_A")

    assert "EAID_A" in first.cache
    assert "EAID_A" not in second.cache
