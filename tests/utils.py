import logging

import pytest

from cinline import logging as cinline_logging
from cinline.data_types import (FunctionSignature, InlineFunctionUnit,
                                TypeDescriptor)
from cinline.utils import load_default_config

AV_CLIP_BODY = "{ if(a<amin) return amin; else if(a>amax) return amax; else return a; }"

AV_CLIP_TRANSLATED = (
    "{\n"
    "    if(a<amin) return amin;\n"
    "    else if(a>amax) return amax;\n"
    "    else return a;\n"
    "    }"
)

AV_FLOAT2INT_BODY = """{
    union av_intfloat32 v;
    v.f = f;
    return v.i;
}"""

AV_INT2FLOAT_BODY = """{
    union av_intfloat32 v;
    v.i = i;
    return v.f;
}"""

AV_DOUBLE2INT_BODY = "{\r\n    union av_intfloat64 v;\r\n    v.f = f;\r\n    return v.i;\r\n}"

AV_INT2DOUBLE_BODY = "{ union av_intfloat64 v; v.i = i; return v.f; }"

AV_INV_Q_BODY = """{
    AVRational r = { q.den, q.num };
    return r;
}"""

AV_Q2D_BODY = """{
    return a.num / (double) a.den;
}"""

AV_CLIP_UINT8_BODY = """{
    if (a&(~0xFF)) return (~a)>>31;
    else           return a;
}"""

AV_CLZ_BODY = """{
    return __builtin_clz(x);
}"""

AV_X_IF_NULL_BODY = """{
    return (void *)(intptr_t)(p ? p : x);
}"""

AND_NOT_BODY = """{
    return a & ~mask;
}"""


@pytest.fixture
def config():
    return load_default_config()


@pytest.fixture
def reset_logging():
    yield
    logger = cinline_logging.get_logger()
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    cinline_logging._state = None


def make_signature(name, return_type="int", params=()):
    parameters = []
    for param_name, param_type in params:
        if isinstance(param_type, str):
            param_type = TypeDescriptor(param_type)
        parameters.append((param_name, param_type))
    if isinstance(return_type, str):
        return_type = TypeDescriptor(return_type)
    return FunctionSignature(name=name, parameters=tuple(parameters), return_type=return_type)


def make_unit(name, body, return_type="int", params=(), summary=None, **docs):
    return InlineFunctionUnit.create(make_signature(name, return_type, params), body, summary, **docs)


def sample_units():
    return [
        make_unit("av_clip_c", AV_CLIP_BODY, "int", [("a", "int"), ("amin", "int"), ("amax", "int")],
                  summary="Clip a signed integer value into the amin-amax range.",
                  parameter_docs=[("a", "value to clip"), ("amin", "minimum value of the clip range"),
                                  ("amax", "maximum value of the clip range")],
                  returns="clipped value"),
        make_unit("av_clip64_c", AV_CLIP_BODY, "int64_t",
                  [("a", "int64_t"), ("amin", "int64_t"), ("amax", "int64_t")]),
        make_unit("av_float2int", AV_FLOAT2INT_BODY, "uint32_t", [("f", "float")],
                  summary="Reinterpret a float as a 32-bit integer."),
        make_unit("av_int2float", AV_INT2FLOAT_BODY, "float", [("i", "uint32_t")]),
        make_unit("av_double2int", AV_DOUBLE2INT_BODY, "uint64_t", [("f", "double")]),
        make_unit("av_int2double", AV_INT2DOUBLE_BODY, "double", [("i", "uint64_t")]),
        make_unit("av_inv_q", AV_INV_Q_BODY, "AVRational", [("q", "AVRational")],
                  summary="Invert a rational."),
        make_unit("av_q2d", AV_Q2D_BODY, "double", [("a", "AVRational")]),
        make_unit("av_clip_uint8_c", AV_CLIP_UINT8_BODY, "uint8_t", [("a", "int")]),
        make_unit("ff_clz", AV_CLZ_BODY, "int", [("x", "uint32_t")]),
        make_unit("av_x_if_null", AV_X_IF_NULL_BODY, TypeDescriptor("void", 1),
                  [("p", TypeDescriptor("void", 1, True)), ("x", TypeDescriptor("void", 1, True))]),
    ]
