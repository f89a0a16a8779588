"""Application use cases."""

from pump.application.use_cases.import_listens import (
    ImportListensCommand,
    ImportListensUseCase,
)

__all__ = ["ImportListensCommand", "ImportListensUseCase"]
