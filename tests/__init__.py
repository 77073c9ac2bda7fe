"""
Test suite for the sparse_sgd online linear-model update engine.

Covers the lazily regularized parameter store, truncated-gradient
sparsification, optimizers, model families, the model orchestrator and the
configuration layer.
"""
