from .frame_assembler import DEFAULT_BUFFER_SIZE, FrameAssembler

__all__ = ["DEFAULT_BUFFER_SIZE", "FrameAssembler"]
