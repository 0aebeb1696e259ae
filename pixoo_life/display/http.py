"""HTTP sink for a Pixoo device or the browser simulator."""

from __future__ import annotations

import base64
from typing import Optional

import requests

from pixoo_life.core.config import GIF_ID_RESET_LIMIT, GRID_SIZE, HTTP_TIMEOUT_S
from pixoo_life.display.sink import DisplayError, DisplaySink


class HttpSink(DisplaySink):
    """Posts each frame over HTTP. Failures raise; there are no retries."""

    def __init__(
        self,
        host: str,
        size: int = GRID_SIZE,
        simulator: bool = False,
        timeout: float = HTTP_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(size)
        self.host = host
        self.simulator = simulator
        self.timeout = timeout
        self._session = session or requests.Session()
        self._counter: int = 1
        if simulator:
            self.url = f"http://{host}/api/draw"
        else:
            self.url = f"http://{host}/post"

    def _post(self, payload: dict) -> dict:
        try:
            response = self._session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DisplayError(f"Push to {self.url} failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            return {}
        if isinstance(data, dict) and data.get("error_code", 0) != 0:
            raise DisplayError(
                f"Device rejected frame: {data.get('error_message', data['error_code'])}"
            )
        return data

    def reset_gif_id(self) -> None:
        self._post({"Command": "Draw/ResetHttpGifId"})

    def frame_payload(self) -> dict:
        """The JSON body for the current buffer."""
        if self.simulator:
            return {"buffer": [int(v) for v in self.buffer.reshape(-1)]}
        return {
            "Command": "Draw/SendHttpGif",
            "PicNum": 1,
            "PicWidth": self.size,
            "PicOffset": 0,
            "PicID": self._counter,
            "PicSpeed": 1000,
            "PicData": base64.b64encode(self.to_bytes()).decode("ascii"),
        }

    def push(self) -> None:
        if not self.simulator:
            self._counter += 1
            if self._counter >= GIF_ID_RESET_LIMIT:
                self.reset_gif_id()
                self._counter = 1
        self._post(self.frame_payload())
