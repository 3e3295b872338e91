import numpy as np


def brute_force_ncc(fixed, moving, fixed_mask=None, moving_mask=None, threshold=0, rel_tol=1e-10):
    """Direct masked NCC for every displacement (small inputs only)."""
    fixed = np.asarray(fixed, np.float64)
    moving = np.asarray(moving, np.float64)
    hf, wf = fixed.shape
    hm, wm = moving.shape
    mf = np.ones_like(fixed, bool) if fixed_mask is None else np.asarray(fixed_mask) != 0
    mm = np.ones_like(moving, bool) if moving_mask is None else np.asarray(moving_mask) != 0
    corr = np.zeros((hf + hm - 1, wf + wm - 1))
    count = np.zeros_like(corr)
    for uy in range(corr.shape[0]):
        for ux in range(corr.shape[1]):
            ty, tx = uy - (hm - 1), ux - (wm - 1)
            y0, y1 = max(0, ty), min(hf, hm + ty)
            x0, x1 = max(0, tx), min(wf, wm + tx)
            if y0 >= y1 or x0 >= x1:
                continue
            a = fixed[y0:y1, x0:x1]
            b = moving[y0-ty:y1-ty, x0-tx:x1-tx]
            valid = mf[y0:y1, x0:x1] & mm[y0-ty:y1-ty, x0-tx:x1-tx]
            n = int(valid.sum())
            count[uy, ux] = n
            if n == 0 or n < threshold:
                continue
            a = a[valid] - a[valid].mean()
            b = b[valid] - b[valid].mean()
            da, db = (a * a).sum(), (b * b).sum()
            if da <= rel_tol * (a.size + 1) or db <= rel_tol * (b.size + 1):
                continue
            corr[uy, ux] = (a * b).sum() / np.sqrt(da * db)
    return corr, count
