from cinline.catalog import (
    get_limit_pairs,
    get_type_map,
    get_type_pairs,
    is_narrow_target,
    map_limit,
    map_type,
    target_type,
)


def test_get_type_map_contains_expected_entries():
    mapping = get_type_map()
    assert mapping["uint32_t"] == "uint"
    assert mapping["size_t"] == "nuint"
    assert mapping["int8_t"] == "sbyte"
    assert tuple(get_type_pairs())[0][0].endswith("_t")


def test_map_type_strips_and_rejects_unknown_names():
    assert map_type("int64_t") == "long"
    assert map_type(" uint8_t ") == "byte"
    assert map_type("intptr_t") is None
    assert map_type("") is None
    assert map_type(None) is None


def test_target_type_passes_unknown_names_through():
    assert target_type("uint16_t") == "ushort"
    assert target_type("AVRational") == "AVRational"


def test_limit_pairs_put_composite_forms_first():
    pairs = get_limit_pairs()
    assert pairs[0][0] == "-9223372036854775807LL - 1"
    assert map_limit("INT_MAX") == "int.MaxValue"
    assert map_limit("-2147483647  -  1") == "int.MinValue"
    assert map_limit("-9223372036854775807LL-1") == "long.MinValue"
    assert map_limit("LLONG_MIN") == "long.MinValue"
    assert map_limit("UINT_MAX") is None


def test_is_narrow_target():
    assert is_narrow_target("byte")
    assert is_narrow_target("ushort")
    assert not is_narrow_target("int")
