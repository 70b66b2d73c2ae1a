# errors.py


class RektCaptchaError(Exception):
    """Base class for every error raised while solving a challenge."""


class ElementNotFound(RektCaptchaError):
    """A required element did not show up within the configured timeout."""


class FrameNotFound(ElementNotFound):
    """The reCAPTCHA iframe exists but its content frame could not be resolved."""


class ChallengeNotFound(ElementNotFound):
    """The challenge (bframe) iframe never appeared."""


class ChallengeFrameNotFound(ElementNotFound):
    """The challenge iframe exists but its content frame could not be resolved."""


class AudioDownloadFailed(RektCaptchaError):
    def __init__(self, url: str, status_code: int, reason: str = ""):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"Failed to download audio: {status_code} {reason}".rstrip())


class UnsupportedAudioFormat(RektCaptchaError):
    """Waveform is not mono 16-bit PCM."""


class ProvisioningFailed(RektCaptchaError):
    """The speech model could not be downloaded or unpacked."""
