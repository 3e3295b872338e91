import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import argparse, cv2, numpy as np
from mncc.config import load_config
from mncc.correlation import masked_fft_ncc


def read_gray(path, what):
    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise SystemExit(f'Cannot read {what}: {path}')
    if img.ndim != 2:
        raise SystemExit(f'{what} must be single-channel, got shape {img.shape}: {path}')
    return img


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description='Masked FFT normalized cross-correlation')
    ap.add_argument('fixed', help='fixed image path')
    ap.add_argument('moving', help='moving image path')
    ap.add_argument('output', help='output .npy path for the correlation surface')
    ap.add_argument('fraction', nargs='?', type=float, default=None,
                    help='required fraction of overlapping pixels')
    ap.add_argument('fixed_mask', nargs='?', default=None, help='fixed mask path')
    ap.add_argument('moving_mask', nargs='?', default=None, help='moving mask path')
    ap.add_argument('--config', default=None, help='YAML config (e.g. configs/masked_ncc.yaml)')
    ap.add_argument('--backend', default=None, help='FFT backend: numpy | opencv')
    ap.add_argument('--required-number', type=int, default=None,
                    help='required number of overlapping pixels')
    ap.add_argument('--verbose', action='store_true')
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    cfg = load_config(args.config)
    if args.fraction is not None:
        cfg['required_fraction_of_overlapping_pixels'] = args.fraction
    if args.required_number is not None:
        cfg['required_number_of_overlapping_pixels'] = args.required_number
    if args.backend is not None:
        cfg['backend'] = args.backend
    if args.verbose:
        cfg['verbose'] = True

    fixed = read_gray(args.fixed, 'fixed image')
    moving = read_gray(args.moving, 'moving image')
    fixed_mask = read_gray(args.fixed_mask, 'fixed mask') if args.fixed_mask else None
    moving_mask = read_gray(args.moving_mask, 'moving mask') if args.moving_mask else None

    res = masked_fft_ncc(fixed, moving, fixed_mask, moving_mask, **cfg)
    np.save(args.output, res.array)

    _, max_val, _, max_loc = cv2.minMaxLoc(res.array)
    zy, zx = res.zero_displacement_index
    print(f'[INFO] Maximum overlapping pixels: {res.max_overlap}')
    print(f"[INFO] Required fraction of overlapping pixels: {cfg['required_fraction_of_overlapping_pixels']}")
    print(f"[INFO] Required number of overlapping pixels: {cfg['required_number_of_overlapping_pixels']}")
    print(f'[INFO] Best displacement (dy, dx) = ({max_loc[1] - zy}, {max_loc[0] - zx}), score={max_val:.4f}')
    print(f'[OK] correlation saved → {args.output}')
    return res


if __name__ == '__main__':
    main()
