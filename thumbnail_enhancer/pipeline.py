"""
Variant Pipeline Module
Runs border removal, resampling, color correction and sharpening for every
requested resolution variant of a source image
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .borders import BorderDetector
from .buffer import PixelBuffer, Rectangle, ensure_buffer
from .codec import decode_image
from .color import ColorAdjuster
from .exceptions import AllocationFailure, DecodeFailure, ProcessingError
from .profiles import EnhancementProfile, select_profile
from .resample import Resampler
from .sharpen import SharpeningFilter
from .variants import Tier, VariantSpec

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]
Encoder = Callable[[PixelBuffer, VariantSpec], bytes]
SourceProvider = Callable[[VariantSpec], Union[PixelBuffer, np.ndarray, bytes]]

CANCELLED = 'cancelled'


@dataclass
class VariantResult:
    """Outcome of one variant: an output buffer or the reason it failed"""
    variant: VariantSpec
    buffer: Optional[PixelBuffer] = None
    encoded: Optional[bytes] = None
    profile: Optional[EnhancementProfile] = None
    passes: List[str] = field(default_factory=list)
    crop: Optional[Rectangle] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_dict(self) -> dict:
        """JSON-serializable summary without pixel data"""
        return {
            'variant': self.variant.as_dict(),
            'status': 'ok' if self.ok else 'failed',
            'profile': self.profile.as_dict() if self.profile is not None else None,
            'passes': list(self.passes),
            'crop': self.crop.as_dict() if self.crop else None,
            'width': self.buffer.width if self.buffer is not None else None,
            'height': self.buffer.height if self.buffer is not None else None,
            'encoded_bytes': len(self.encoded) if self.encoded is not None else None,
            'error': self.error,
            'error_type': self.error_type,
        }


@dataclass
class PipelineManifest:
    """Per-variant results of a run, in request order"""
    results: List[VariantResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def succeeded(self) -> List[VariantResult]:
        return [result for result in self.results if result.ok]

    @property
    def failed(self) -> List[VariantResult]:
        return [result for result in self.results if not result.ok]

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    def to_dict(self) -> dict:
        return {
            'total': len(self.results),
            'succeeded': len(self.succeeded),
            'failed': len(self.failed),
            'cancelled': self.cancelled,
            'variants': [result.as_dict() for result in self.results],
        }


class VariantPipeline:
    """Sequential, failure-isolated processing of resolution variants"""

    def __init__(self,
                 profile: Optional[EnhancementProfile] = None,
                 enhancement_enabled: Optional[bool] = None,
                 mode: Optional[str] = None,
                 threshold: Optional[int] = None,
                 upscale: Optional[bool] = None,
                 backend: Optional[str] = None,
                 encoder: Optional[Encoder] = None):
        """
        Initialize the pipeline
        Unset values come from environment configuration

        Args:
            profile: Run profile used for enhanced variants (default: PRO)
            enhancement_enabled: When False every variant is passed through plain
            mode: 'exclusive' (one profile for the run) or 'tiered' (per variant tier)
            threshold: Border darkness cutoff
            upscale: Allow the resampler to enlarge small sources
            backend: Resampling backend, 'opencv' or 'scikit'
            encoder: Optional callable turning a finished buffer into bytes
        """
        self.profile = profile
        self.enhancement_enabled = enhancement_enabled
        self.mode = mode
        self.border_detector = BorderDetector(threshold)
        self.resampler = Resampler(upscale=upscale, backend=backend)
        self.encoder = encoder
        # Resolve once so configuration errors surface before any variant runs
        select_profile(Tier.STANDARD, enhancement_enabled, mode, profile)

    def profile_for(self, variant: VariantSpec) -> EnhancementProfile:
        return select_profile(variant.tier, self.enhancement_enabled, self.mode, self.profile)

    def process_variant(self, source: PixelBuffer, variant: VariantSpec,
                        profile: Optional[EnhancementProfile] = None
                        ) -> Tuple[PixelBuffer, List[str], Rectangle]:
        """
        Produce the output buffer of one variant

        The source is never modified; the variant works on its own copy.

        Args:
            source: Decoded source image
            variant: Variant to produce
            profile: Profile to apply (default: chosen from the variant tier)

        Returns:
            (output buffer, names of the passes applied, crop rectangle used)
        """
        profile = profile or self.profile_for(variant)
        if source.is_empty:
            raise DecodeFailure('source image has no pixels')

        passes = []
        buffer = source.copy()
        crop = buffer.full_rect()

        if variant.remove_border and profile.remove_border:
            buffer, crop = self.border_detector.crop(buffer)
            passes.append('remove_border')

        if profile.resample:
            resampled = self.resampler.resample(buffer, variant.target_width, variant.target_height)
            # Pass-through sizes leave the buffer as it is
            if resampled is not buffer:
                buffer = resampled
                passes.append('resample')

        if profile.adjust_color:
            ColorAdjuster.from_profile(profile, buffer).apply(buffer)
            passes.append('adjust_color')

        if profile.sharpen:
            SharpeningFilter(profile.kernel).apply(buffer)
            passes.append('sharpen')

        return buffer, passes, crop

    def run(self,
            source: Union[PixelBuffer, np.ndarray, SourceProvider],
            variants: Sequence[VariantSpec],
            progress_callback: Optional[ProgressCallback] = None,
            cancel_event=None) -> PipelineManifest:
        """
        Process every variant in order

        A failing variant is recorded and skipped; the run always finishes and
        always reports 100%. Cancellation is only honoured between variants.

        Args:
            source: Decoded source image, or a callable returning the source
                    (buffer, array or encoded bytes) for a given variant
            variants: Variants to produce, in order
            progress_callback: Called as (fraction, message)
            cancel_event: Object with is_set(), e.g. threading.Event

        Returns:
            PipelineManifest with one entry per variant
        """
        manifest = PipelineManifest()
        total = len(variants)

        def report(fraction: float, message: str) -> None:
            if progress_callback is not None:
                progress_callback(fraction, message)

        report(0.0, 'Initializing thumbnail extraction...')

        for index, variant in enumerate(variants):
            if not manifest.cancelled and cancel_event is not None and cancel_event.is_set():
                logger.info(f"Run cancelled before '{variant.label}'")
                manifest.cancelled = True

            if manifest.cancelled:
                result = VariantResult(variant=variant, error=CANCELLED, error_type='Cancelled')
                message = f'Skipped {variant.label} thumbnail'
            else:
                result = self._run_variant(source, variant)
                message = (f'Processed {variant.label} thumbnail' if result.ok
                           else f'Failed {variant.label} thumbnail')

            manifest.results.append(result)
            report((index + 1) / total, message)

        logger.info(f"Processed {len(manifest.succeeded)}/{total} variants, "
                    f"{len(manifest.failed)} failed")
        if manifest.cancelled:
            report(1.0, 'Thumbnail extraction cancelled')
        elif manifest.failed:
            report(1.0, f'Thumbnails processed with {len(manifest.failed)} failure(s)')
        else:
            report(1.0, 'All thumbnails processed successfully!')
        return manifest

    def _run_variant(self, source, variant: VariantSpec) -> VariantResult:
        result = VariantResult(variant=variant)
        try:
            profile = self.profile_for(variant)
            result.profile = profile
            source_buffer = self._resolve_source(source, variant)
            buffer, passes, crop = self.process_variant(source_buffer, variant, profile)
            if self.encoder is not None:
                result.encoded = self.encoder(buffer, variant)
                passes.append('encode')
            result.buffer, result.passes, result.crop = buffer, passes, crop
        except MemoryError:
            error = AllocationFailure()
            result.error, result.error_type = str(error), type(error).__name__
            logger.warning(f"Failed to process {variant.label}: {error}")
        except Exception as exc:
            result.error = str(exc) or repr(exc)
            result.error_type = type(exc).__name__
            logger.warning(f"Failed to process {variant.label}: {result.error}")
        return result

    @staticmethod
    def _resolve_source(source, variant: VariantSpec) -> PixelBuffer:
        if callable(source) and not isinstance(source, (PixelBuffer, np.ndarray)):
            try:
                source = source(variant)
            except ProcessingError:
                raise
            except Exception as exc:
                raise DecodeFailure(f"source for '{variant.label}' unavailable: {exc}") from exc
        if source is None:
            raise DecodeFailure(f"no source image for '{variant.label}'")
        if isinstance(source, (bytes, bytearray)):
            return decode_image(bytes(source))
        return ensure_buffer(source)
