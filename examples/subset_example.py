"""
Example script for subset sampling with dicsubset.

This example demonstrates:
1. Loading (or synthesising) a reference image
2. Building a rectangle subset and a point-list subset
3. Filling reference intensities by exact lookup
4. Filling deformed intensities through a deformation map
5. Comparing the two buffers and exporting them as TIFF files

Usage:
    python subset_example.py --image path/to/ImageA.tif --u 200 --v 50
    python subset_example.py --plot

Without --image a synthetic speckle pattern is used.
"""

import argparse
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt
from scipy.ndimage import gaussian_filter

from dicsubset import (
    DeformationMap,
    FillMode,
    Image,
    InterpolationMethod,
    SamplingParameters,
    Subset,
)
from dicsubset.utils.image_writer import render_intensity_buffer


def synthetic_speckle(height: int = 400, width: int = 400, seed: int = 42) -> np.ndarray:
    """Smoothed random speckle pattern as uint8."""
    rng = np.random.default_rng(seed)
    data = gaussian_filter(rng.random((height, width)), sigma=2.0)
    data = (data - data.min()) / (data.max() - data.min())
    return (data * 255).astype(np.uint8)


def run_example(
    image_path: str = None,
    u: float = 200.0,
    v: float = 50.0,
    theta: float = 0.0,
    method: str = "bilinear",
    output_dir: str = ".",
    plot: bool = False,
):
    """
    Run the subset sampling example.

    Args:
        image_path: Reference image (synthetic speckle if None)
        u: Displacement in x (pixels)
        v: Displacement in y (pixels)
        theta: Rotation (radians)
        method: Interpolation scheme
        output_dir: Where the TIFF files are written
        plot: Show the reference and deformed patches
    """

    # === 1. Load image ===
    params = SamplingParameters(interpolation=InterpolationMethod(method))
    if image_path:
        image = Image.from_file(image_path, params=params)
        print(f"Reference image: {image.width} x {image.height} pixels")
    else:
        image = Image.from_array(synthetic_speckle(), name="synthetic", params=params)
        print(f"Synthetic reference: {image.width} x {image.height} pixels")

    # === 2. Build subsets ===
    cx, cy = 125, 250
    square = Subset.from_rectangle(cx, cy, 13, 19)
    print(f"Rectangle subset: {square.num_pixels()} pixels, "
          f"bounding box {square.bounding_box()}")

    xs = [i * 2 + 4 for i in range(48)]
    ys = [42 + i for i in range(48)]
    points = Subset(cx, cy, xs, ys)
    print(f"Point-list subset: {points.num_pixels()} pixels")

    # === 3. Reference intensities ===
    square.initialize(image)
    points.initialize(image)
    print(f"Mean reference intensity: {square.mean():.4f}")

    # === 4. Deformed intensities ===
    deformation = DeformationMap(u=u, v=v, theta=theta)
    square.initialize(image, deformation, FillMode.FILL_DEF)
    print(f"Centroid maps to {deformation.apply(cx, cy, cx, cy)}")
    print(f"Mean deformed intensity: {square.mean(use_deformed=True):.4f}")
    print(f"ZNSSD between buffers: {square.gamma():.4f}")

    # === 5. Export ===
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    ref_path = square.write_tif(output_dir / "squareSubsetRef.tif", use_deformed=False)
    def_path = square.write_tif(output_dir / "squareSubsetDef.tif", use_deformed=True)
    print(f"Wrote {ref_path} and {def_path}")

    if plot:
        min_x, min_y, max_x, max_y = square.bounding_box()
        sub_xs, sub_ys = square.coordinates()
        width, height = max_x - min_x + 1, max_y - min_y + 1

        fig, axes = plt.subplots(1, 2, figsize=(8, 5))
        for ax, values, title in (
            (axes[0], square.reference_intensities, "Reference"),
            (axes[1], square.deformed_intensities, "Deformed"),
        ):
            patch = render_intensity_buffer(values, sub_xs - min_x, sub_ys - min_y, width, height)
            ax.imshow(patch, cmap="gray", vmin=0, vmax=1)
            ax.set_title(title)
            ax.axis("off")
        plt.tight_layout()
        plt.show()

    return square


def main():
    parser = argparse.ArgumentParser(description="Subset sampling example")
    parser.add_argument("--image", type=str, default=None, help="Reference image path")
    parser.add_argument("--u", type=float, default=200.0, help="Displacement in x")
    parser.add_argument("--v", type=float, default=50.0, help="Displacement in y")
    parser.add_argument("--theta", type=float, default=0.0, help="Rotation in radians")
    parser.add_argument(
        "--method",
        choices=[m.value for m in InterpolationMethod],
        default="bilinear",
        help="Interpolation scheme",
    )
    parser.add_argument("--output-dir", type=str, default=".", help="Output directory")
    parser.add_argument("--plot", action="store_true", help="Show the patches")
    args = parser.parse_args()

    run_example(
        image_path=args.image,
        u=args.u,
        v=args.v,
        theta=args.theta,
        method=args.method,
        output_dir=args.output_dir,
        plot=args.plot,
    )


if __name__ == "__main__":
    main()
