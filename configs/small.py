from refnorm.config import LayernormConf
cfg = [
    LayernormConf(m=4, n=8),
    LayernormConf(m=16, n=64, post_op="FastGelu"),
    LayernormConf(m=8, n=128, x_dtype="float16", y_dtype="float16",
                  gamma_dtype="float16", beta_dtype="float16", save_dtype="float16"),
    LayernormConf(m=8, n=32, lengths=[8, 32, 1]),  # rank 3: skipped
]
