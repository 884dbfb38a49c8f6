"""Benchmark cosine power filtering.

Times the brute force gather across source and output sizes and compares
chunk sizes at a fixed size to show the memory/speed trade-off.
"""

import time

import torch

from torchcube import CubeSurface
from torchcube.filter import cosine_power_filter


def benchmark_filter(
    edge_length: int,
    size: int,
    cosine_power: float = 16.0,
    n_iterations: int = 5,
    device: str = "cpu",
    chunk_size: int | None = None,
) -> float:
    """Benchmark one filter configuration.

    Parameters
    ----------
    edge_length : int
        Edge length of the source cube.
    size : int
        Edge length of the filtered cube.
    cosine_power : float
        Lobe exponent.
    n_iterations : int
        Number of iterations for timing.
    device : str
        Device to run on ('cpu' or 'cuda').
    chunk_size : int, optional
        Output texels per chunk. Default lets the filter choose.

    Returns
    -------
    float
        Average time per filter call in milliseconds.
    """
    cube = CubeSurface.from_faces(
        torch.rand(6, 4, edge_length, edge_length, device=device)
    )

    # Warmup, also fills the table cache
    _ = cosine_power_filter(cube, size, cosine_power, chunk_size=chunk_size)

    if device == "cuda":
        torch.cuda.synchronize()

    start = time.perf_counter()
    for _ in range(n_iterations):
        _ = cosine_power_filter(
            cube, size, cosine_power, chunk_size=chunk_size
        )

    if device == "cuda":
        torch.cuda.synchronize()

    elapsed = time.perf_counter() - start
    return elapsed / n_iterations * 1000  # ms


def main():
    """Run filter benchmarks across sizes and chunk sizes."""
    device = "cuda" if torch.cuda.is_available() else "cpu"
    configurations = [(8, 4), (16, 8), (32, 8), (32, 16), (64, 16)]

    print(f"Cosine Power Filter Benchmark ({device})")
    print("=" * 50)
    print(f"{'Source':>8} {'Output':>8} {'Texel pairs':>14} {'Time (ms)':>14}")
    print("-" * 50)

    for edge_length, size in configurations:
        pairs = 36 * edge_length**2 * size**2
        ms = benchmark_filter(edge_length, size, device=device)
        print(f"{edge_length:>8} {size:>8} {pairs:>14} {ms:>14.4f}")

    print()
    print(f"{'Chunk size':>12} {'Time (ms)':>14}")
    print("-" * 28)

    for chunk_size in [64, 256, 1024, None]:
        ms = benchmark_filter(32, 16, device=device, chunk_size=chunk_size)
        label = "auto" if chunk_size is None else str(chunk_size)
        print(f"{label:>12} {ms:>14.4f}")


if __name__ == "__main__":
    main()
