"""Save and load polynomial convolution operators to/from ``.npz`` files.

The archive stores the entry arrays of ``S_fv`` and ``S_vf``, the dense
tables, the reference scales, and one JSON metadata record.

Usage
-----
    from tangentparam.data import save_conv, load_conv

    save_conv(conv, 'bunny_conv.npz', extra_meta={'mesh': 'bunny.obj'})
    conv2, meta = load_conv('bunny_conv.npz')
"""

import json
from pathlib import Path
from typing import Optional

import numpy as np

from tangentparam._polyconv import PolynomialConv
from tangentparam._sparse import SparseEntries

FORMAT = 'tangentparam_conv_v1'


def save_conv(
    conv: PolynomialConv,
    path: str = 'conv.npz',
    extra_meta: Optional[dict] = None,
) -> str:
    """Serialize a computed operator to a compressed ``.npz`` file.

    Parameters
    ----------
    conv : PolynomialConv
        Operator returned by ``polynomial_conv``.
    path : str or Path
        Output file path.
    extra_meta : dict or None
        Additional JSON-serializable metadata to store.

    Returns
    -------
    str
        The path written to (for chaining).
    """
    meta = {
        'format': FORMAT,
        'axis_num': int(conv.axis_num),
        'n_vertices': int(conv.n_vertices),
        'n_faces': int(conv.n_faces),
        'use_patch_height': bool(conv.use_patch_height),
    }
    if extra_meta:
        meta['meta'] = extra_meta

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'wb') as f:
        np.savez_compressed(
            f,
            S_fv_rows=conv.S_fv.rows, S_fv_cols=conv.S_fv.cols, S_fv_vals=conv.S_fv.vals,
            S_vf_rows=conv.S_vf.rows, S_vf_cols=conv.S_vf.cols, S_vf_vals=conv.S_vf.vals,
            D_fw=conv.D_fw,
            D_patchinput=conv.D_patchinput,
            ring_ref_scale=conv.ring_ref_scale,
            meta=np.array(json.dumps(meta)),
        )
    return str(path)


def load_conv(path: str) -> tuple:
    """Load an operator written by :func:`save_conv`.

    Returns
    -------
    conv : PolynomialConv
    meta : dict
        The stored metadata, with any ``extra_meta`` merged in. Stored keys win
        over ``extra_meta`` keys of the same name.
    """
    with np.load(path, allow_pickle=False) as data:
        meta = json.loads(data['meta'].item())
        if meta.get('format') != FORMAT:
            raise ValueError(
                f"{path} is not a {FORMAT} archive (format={meta.get('format')!r})"
            )
        conv = PolynomialConv(
            S_fv=SparseEntries(data['S_fv_rows'], data['S_fv_cols'], data['S_fv_vals'],
                               dtype=data['S_fv_vals'].dtype),
            S_vf=SparseEntries(data['S_vf_rows'], data['S_vf_cols'], data['S_vf_vals'],
                               dtype=data['S_vf_vals'].dtype),
            D_fw=data['D_fw'],
            D_patchinput=data['D_patchinput'],
            ring_ref_scale=data['ring_ref_scale'],
            axis_num=meta['axis_num'],
            n_vertices=meta['n_vertices'],
            n_faces=meta['n_faces'],
        )

    extra = meta.pop('meta', None) or {}
    return conv, {**extra, **meta}
