# refnorm/utils/generators.py
import torch

KINDS = ("zeros", "ones", "normal", "uniform", "arange")


def fill(shape, kind: str = "normal", dtype: torch.dtype = torch.float32,
         generator: torch.Generator | None = None) -> torch.Tensor:
    """
    Host tensor of `shape` filled according to `kind`.
    Random kinds draw in float32 from `generator` and are then cast, so the
    same seed gives the same values regardless of the target dtype.
    """
    if kind == "zeros":
        return torch.zeros(shape, dtype=dtype)
    if kind == "ones":
        return torch.ones(shape, dtype=dtype)
    if kind == "normal":
        return torch.randn(shape, generator=generator).to(dtype)
    if kind == "uniform":  # [-1, 1)
        return (torch.rand(shape, generator=generator) * 2 - 1).to(dtype)
    if kind == "arange":
        numel = 1
        for s in shape:
            numel *= s
        return torch.arange(numel, dtype=torch.float32).reshape(shape).to(dtype)
    raise ValueError(f"Unknown init '{kind}', expected one of {KINDS}")


def make_generator(seed: int) -> torch.Generator:
    g = torch.Generator()
    g.manual_seed(seed)
    return g
