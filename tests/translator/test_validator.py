import pytest

from cinline.translator.validator import (
    COMPLEX_EXPRESSION_REASON,
    COMPLEX_PATTERNS,
    ConfidenceValidator,
    NOT_A_BLOCK_REASON,
    reject,
)
from tests import utils as test_utils
from tests.utils import config


def test_accepts_translated_clamp():
    report = ConfidenceValidator().validate(test_utils.AV_CLIP_TRANSLATED)
    assert report.accepted
    assert report.reasons == ()
    assert report.describe() == ""


def test_unmatched_braces():
    report = ConfidenceValidator().validate("{\n    return a;\n")
    assert not report.accepted
    assert "Unmatched braces" in report.reasons


def test_unmatched_parentheses_and_incomplete_statement():
    report = ConfidenceValidator().validate("{\n    return (a + b;\n    }")
    assert "Unmatched parentheses" in report.reasons
    assert "Incomplete statements" in report.reasons


def test_missing_closing_parenthesis():
    report = ConfidenceValidator().validate("{\n    x = y : (z;\n    }")
    assert "Missing closing parenthesis" in report.reasons


@pytest.mark.parametrize("code, description", [
    ("return a & ~mask;", "bitwise AND with complement"),
    ("return a&~mask;", "bitwise AND with complement"),
    ("return a ? b : c;", "ternary conditional"),
    ("return a | 1;", "bitwise OR against a literal"),
    ("return a|1;", "bitwise OR against a literal"),
    ("return a ^ b;", "bitwise XOR"),
    ("return a^b;", "bitwise XOR"),
    ("return a >> 31 & 1;", "shift right combined with bitwise AND"),
    ("if (a & (b - 1)) return 1;", "integer-to-boolean if guard"),
    ("return (~a) >> 31;", "complemented shift return"),
    ("return 1U << n;", "shifted unsigned literal"),
    ("return foo(a);", "function call inside return"),
    ("p = (byte**)buf;", "double-pointer buffer cast"),
])
def test_denylist(code, description):
    report = ConfidenceValidator().validate("{\n    " + code + "\n    }")
    assert not report.accepted
    complex_reasons = [r for r in report.reasons if r.startswith(COMPLEX_EXPRESSION_REASON)]
    assert len(complex_reasons) == 1
    assert description in complex_reasons[0]


def test_narrowing_return_is_rejected():
    signature = test_utils.make_signature("av_clip_uint8_c", "uint8_t", [("a", "int")])
    report = ConfidenceValidator().validate("{\n    return a;\n    }", signature)
    assert report.reasons == ("Narrowing return to byte (a)",)


def test_return_of_same_width_parameter_is_accepted():
    signature = test_utils.make_signature("identity", "uint8_t", [("a", "uint8_t")])
    report = ConfidenceValidator().validate("{\n    return a;\n    }", signature)
    assert report.accepted


def test_literal_return_is_not_narrowing():
    signature = test_utils.make_signature("zero", "uint8_t")
    assert ConfidenceValidator().validate("{\n    return 0;\n    }", signature).accepted


def test_uninitialized_var_is_rejected():
    report = ConfidenceValidator().validate("{\n    var x;\n    x = 1;\n    return x;\n    }")
    assert "Implicitly typed local without initializer" in report.reasons


@pytest.mark.parametrize("code, fragment", [
    ("return NULL;", "C NULL macro 'NULL'"),
    ("return (intptr_t)a;", "C type name 'intptr_t'"),
    ("return UINT_MAX;", "C limit macro 'UINT_MAX'"),
    ("return (unsigned)a;", "C unsigned qualifier 'unsigned'"),
])
def test_residual_c_constructs(code, fragment):
    report = ConfidenceValidator().validate("{\n    " + code + "\n    }")
    assert not report.accepted
    assert any(fragment in reason for reason in report.reasons)


def test_residual_check_can_be_disabled():
    validator = ConfidenceValidator(check_residual_c=False)
    assert validator.validate("{\n    return NULL;\n    }").accepted


def test_extra_denylist_entries():
    validator = ConfidenceValidator(extra_denylist=[
        {"pattern": r"sizeof\(", "description": "sizeof expression"},
    ])
    report = validator.validate("{\n    return sizeof(int);\n    }")
    assert "sizeof expression" in report.describe()


def test_extra_denylist_entry_without_pattern():
    with pytest.raises(ValueError):
        ConfidenceValidator(extra_denylist=[{"description": "nothing"}])


def test_from_config_defaults(config):
    validator = ConfidenceValidator.from_config(config)
    assert validator.check_residual_c
    assert len(validator.denylist) == len(COMPLEX_PATTERNS)


def test_from_config_extra_entries(config):
    config["validation"]["extra_denylist"] = [{"pattern": "goto", "description": "goto"}]
    config["validation"]["residual_c_check"] = False
    validator = ConfidenceValidator.from_config(config)
    assert not validator.check_residual_c
    assert len(validator.denylist) == len(COMPLEX_PATTERNS) + 1


def test_reject_comments_out_and_throws():
    stub = reject("{\n    return a ^ b;\n    }", ["A", "B"])
    lines = stub.split("\n")
    assert lines[:3] == ["// {", "//     return a ^ b;", "//     }"]
    assert lines[-1] == (
        'throw new NotImplementedException("Function has syntax errors or complex patterns: '
        'A, B. Manual conversion required.");'
    )


@pytest.mark.parametrize("code", [
    "if (a && ~b) return 1;",
    "if (a || 1) return 1;",
    "return *(uint*)&f;",
])
def test_logical_operators_and_address_of_are_allowed(code):
    assert ConfidenceValidator().validate("{\n    " + code + "\n    }").accepted


def test_body_must_be_a_block():
    code = "int av_clip_c(int a,int amin,int amax) {\n    if(a<amin) return amin;\n    else return a;\n    }"
    report = ConfidenceValidator().validate(code)
    assert report.reasons == (NOT_A_BLOCK_REASON,)
