from .writer import MANIFEST_FILENAME, OutputWriter, WriteOutcome

__all__ = ["MANIFEST_FILENAME", "OutputWriter", "WriteOutcome"]
