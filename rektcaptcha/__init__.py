from .errors import (
    AudioDownloadFailed,
    ChallengeFrameNotFound,
    ChallengeNotFound,
    ElementNotFound,
    FrameNotFound,
    ProvisioningFailed,
    RektCaptchaError,
    UnsupportedAudioFormat,
)
from .model import MODEL_DIR, MODEL_URL, ModelDescriptor, ensure_model
from .solver import RektCaptcha

__version__ = "0.1.0"

__all__ = [
    "RektCaptcha",
    "ModelDescriptor",
    "ensure_model",
    "MODEL_DIR",
    "MODEL_URL",
    "RektCaptchaError",
    "ElementNotFound",
    "FrameNotFound",
    "ChallengeNotFound",
    "ChallengeFrameNotFound",
    "AudioDownloadFailed",
    "UnsupportedAudioFormat",
    "ProvisioningFailed",
]
