from .intake_upload import IntakeUploadUseCase

__all__ = [
    "IntakeUploadUseCase",
]
