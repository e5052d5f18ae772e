from refnorm.config import LayernormConf
cfg = [
    LayernormConf(
        m=m, n=n,
        x_dtype="bfloat16", gamma_dtype="bfloat16", beta_dtype="bfloat16",
        y_dtype="bfloat16", save_dtype="float32",
        post_op=post_op, init="uniform", seed=m * n,
    )
    for m, n in [(2, 16), (8, 96), (32, 256)]
    for post_op in ("PassThrough", "Swish")
]
