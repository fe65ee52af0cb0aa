"""
Device utility for automatic inference device detection.

Used by the STT and TTS clients when their device is set to "auto".
"""

import os
import torch
import logging

logger = logging.getLogger(__name__)

def best_device(prefer_mps=True):
    """
    Detect the best available device with proper fallback handling.

    Args:
        prefer_mps: Whether to prefer MPS over CPU if available

    Returns:
        str: Device string ("cuda", "mps", or "cpu")
    """
    if "PYTORCH_ENABLE_MPS_FALLBACK" not in os.environ:
        os.environ["PYTORCH_ENABLE_MPS_FALLBACK"] = "1"

    if torch.cuda.is_available():
        logger.info("CUDA detected and available")
        return "cuda"

    # Apple Silicon
    if prefer_mps and hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
        try:
            test_tensor = torch.empty(1, device="mps")
            del test_tensor
            logger.info("MPS detected and functional")
            return "mps"
        except RuntimeError as e:
            logger.warning(f"MPS detected but not functional: {e}. Falling back to CPU")

    logger.info("Using CPU device")
    return "cpu"
