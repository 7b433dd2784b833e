from collections import deque
from typing import Deque, List, Optional, Union

from infrastructure.logging import HFTLoggerInterface, get_logger

Frame = Union[str, bytes]


class PendingFrameQueue:
    """
    FIFO of outbound frames held while the connection is being established.

    Bounded: when full, the oldest frame is dropped with a warning.
    """

    def __init__(self, max_size: int = 1000, logger: Optional[HFTLoggerInterface] = None):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.logger = logger or get_logger('ws.frame_queue')
        self._frames: Deque[Frame] = deque()
        self.dropped = 0

    def put(self, frame: Frame) -> None:
        if len(self._frames) >= self.max_size:
            self._frames.popleft()
            self.dropped += 1
            self.logger.warning("Pending frame queue full, dropping oldest",
                                max_size=self.max_size,
                                dropped_total=self.dropped)
            self.logger.metric("ws_pending_frames_dropped", 1)
        self._frames.append(frame)

    def drain(self) -> List[Frame]:
        """Remove and return all frames in insertion order."""
        frames = list(self._frames)
        self._frames.clear()
        return frames

    def clear(self) -> int:
        count = len(self._frames)
        self._frames.clear()
        return count

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)
