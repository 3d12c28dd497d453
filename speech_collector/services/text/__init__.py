"""Text cleaning and segmentation."""

from speech_collector.services.text.segmenter import clean_text, load_text_file, segment_text

__all__ = ["clean_text", "load_text_file", "segment_text"]
