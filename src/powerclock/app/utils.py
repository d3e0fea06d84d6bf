from datetime import date
from inspect import Parameter
from types import UnionType
from typing import List, Union, get_args, get_origin

from fastcore.basics import first, listify, noop, str2bool, str2date, str2int
from starlette.datastructures import UploadFile

empty = Parameter.empty


def _mk_list(t, v): return [t(o) for o in listify(v)]


def _fix_anno(t, o):
    "Cast a `str` (or list of them) to type `t`, or the first non-None type in `t` if union"
    origin = get_origin(t)
    if origin is Union or origin is UnionType or origin in (list, List):
        t = first(o for o in get_args(t) if o != type(None))
    d = {bool: str2bool, int: str2int, date: str2date, UploadFile: noop}
    res = d.get(t, t)
    if origin in (list, List): return _mk_list(res, o)
    if not isinstance(o, (str, list, tuple)): return o
    return res(o[-1]) if isinstance(o, (list, tuple)) else res(o)


def coerce_param(p: Parameter, value):
    "Cast `value` for parameter `p`, leaving it alone when unannotated"
    if value is None or p.annotation is empty: return value
    return _fix_anno(p.annotation, value)
