import math

import pytest
import torch

from refnorm.elementwise import Negate, PassThrough
from refnorm.norm import ReferenceLayernorm, layernorm_ref, layernorm_torch


def _run(x, gamma, beta, eps=1e-5, post_op=None, compute_dtype=torch.float32,
         y_dtype=None, save_dtype=None):
    M, N = x.shape
    y = torch.empty(M, N, dtype=y_dtype or x.dtype)
    mean = torch.empty(M, dtype=save_dtype or x.dtype)
    inv_std = torch.empty(M, dtype=save_dtype or x.dtype)
    layernorm_ref(x, gamma, beta, y, mean, inv_std, post_op or PassThrough(),
                  [M, N], [1], eps, compute_dtype=compute_dtype)
    return y, mean, inv_std


def test_concrete_two_by_three():
    x = torch.tensor([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    y, mean, inv_std = _run(x, torch.ones(3), torch.zeros(3), eps=0.0)

    assert torch.allclose(mean, torch.tensor([2.0, 5.0]))
    var = 1.0 / inv_std.double() ** 2
    assert torch.allclose(var, torch.full((2,), 2.0 / 3.0, dtype=torch.float64), rtol=1e-5)
    row = torch.tensor([-1.0, 0.0, 1.0]) / math.sqrt(2.0 / 3.0)
    assert torch.allclose(y, torch.stack([row, row]), atol=1e-5)


def test_zero_input():
    M, N, eps = 3, 5, 1e-5
    y, mean, inv_std = _run(torch.zeros(M, N), torch.ones(N), torch.zeros(N), eps=eps)
    assert torch.equal(y, torch.zeros(M, N))
    assert torch.equal(mean, torch.zeros(M))
    expected = 1.0 / torch.sqrt(torch.tensor(eps, dtype=torch.float32))
    assert torch.allclose(inv_std, expected.expand(M))


def test_statistics_match_formulas():
    torch.manual_seed(0)
    M, N, eps = 6, 33, 1e-5
    x = torch.randn(M, N)
    _, mean, inv_std = _run(x, torch.ones(N), torch.zeros(N), eps=eps)

    xd = x.double()
    mean_ref = xd.sum(1) / N
    var_ref = (xd * xd).sum(1) / N - mean_ref ** 2
    assert torch.allclose(mean.double(), mean_ref, atol=1e-6)
    assert torch.allclose(inv_std.double(), 1.0 / torch.sqrt(var_ref + eps), rtol=1e-5)


def test_affine_reconstruction():
    torch.manual_seed(1)
    M, N = 4, 16
    x = torch.randn(M, N) * 3 + 1
    gamma = torch.rand(N) + 0.5
    beta = torch.randn(N)
    y, mean, inv_std = _run(x, gamma, beta, eps=0.0)

    x_rec = (y - beta) / gamma / inv_std[:, None] + mean[:, None]
    assert torch.allclose(x_rec, x, atol=1e-4)


def test_deterministic():
    torch.manual_seed(2)
    x, gamma, beta = torch.randn(5, 12), torch.randn(12), torch.randn(12)
    a = _run(x, gamma, beta)
    b = _run(x, gamma, beta)
    for t1, t2 in zip(a, b):
        assert torch.equal(t1, t2)


def test_post_op_after_affine():
    torch.manual_seed(3)
    x, gamma, beta = torch.randn(3, 7), torch.randn(7), torch.randn(7)
    y_id, mean_id, inv_id = _run(x, gamma, beta)
    y_neg, mean_neg, inv_neg = _run(x, gamma, beta, post_op=Negate())
    assert torch.equal(y_neg, -y_id)
    # statistics are not touched by the epilogue
    assert torch.equal(mean_neg, mean_id)
    assert torch.equal(inv_neg, inv_id)


def test_post_op_called_once_per_element():
    calls = []

    def count(y):
        calls.append(y.dtype)
        return y

    _run(torch.randn(4, 6), torch.ones(6), torch.zeros(6), post_op=count)
    assert len(calls) == 4 * 6
    assert set(calls) == {torch.float32}


def test_zero_eps_constant_row_not_clamped():
    x = torch.full((1, 4), 3.0)
    y, mean, inv_std = _run(x, torch.ones(4), torch.zeros(4), eps=0.0)
    assert mean[0] == 3.0
    assert torch.isinf(inv_std[0])
    assert torch.isnan(y).all()


def test_half_storage_float_compute():
    torch.manual_seed(4)
    x = torch.randn(4, 64).half()
    gamma, beta = torch.randn(64).half(), torch.randn(64).half()
    y, mean, inv_std = _run(x, gamma, beta, save_dtype=torch.float32)
    assert y.dtype == torch.float16
    assert mean.dtype == torch.float32

    xf = x.float()
    mu = xf.sum(1) / 64
    var = (xf * xf).sum(1) / 64 - mu * mu
    ref = (xf - mu[:, None]) / torch.sqrt(var[:, None] + 1e-5) * gamma.float() + beta.float()
    assert torch.allclose(y.float(), ref, atol=1e-2, rtol=1e-2)


def test_double_compute():
    x = torch.tensor([[1.0, 2.0, 3.0]])
    y, _, inv_std = _run(x, torch.ones(3), torch.zeros(3), eps=0.0, compute_dtype=torch.float64)
    assert inv_std[0].item() == pytest.approx(1.0 / math.sqrt(2.0 / 3.0), rel=1e-6)


def test_operator_protocol():
    op = ReferenceLayernorm()
    assert op.get_type_string().strip() == "ReferenceLayernorm"
    assert ReferenceLayernorm.is_valid_compilation_parameter()

    x = torch.randn(2, 4)
    y, mean, inv_std = torch.empty(2, 4), torch.empty(2), torch.empty(2)
    arg = op.make_argument(x, torch.ones(4), torch.zeros(4), y, mean, inv_std,
                           PassThrough(), [2, 4], [1], 1e-5)
    assert op.is_supported_argument(arg)
    assert op.make_invoker().run(arg) == 0.0
    assert op.make_invoker_pointer().run(arg) == 0.0
    assert torch.isfinite(y).all()


def test_affine_params_read_through_x_dtype():
    x = torch.tensor([[1.0, 2.0, 4.0]]).half()
    gamma = torch.full((3,), 1.0001)             # 1.0 once narrowed to fp16
    beta = torch.full((3,), 0.1)
    wide = _run(x, gamma, beta, y_dtype=torch.float32, save_dtype=torch.float32)
    narrow = _run(x, gamma.half(), beta.half(), y_dtype=torch.float32, save_dtype=torch.float32)
    for t1, t2 in zip(wide, narrow):
        assert torch.equal(t1, t2)

    y_vec, _, _ = layernorm_torch(x, gamma, beta, 1e-5, y_dtype=torch.float32)
    assert torch.allclose(y_vec, wide[0], atol=1e-6)
