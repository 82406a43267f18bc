"""
Request/response bodies for the HTTP API.

Field names on the wire are camelCase, matching the browser client.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ScanIn(_CamelModel):
    photo_data_uri: str = Field(
        alias="photoDataUri",
        description="Camera frame as data:<mimetype>;base64,<encoded_data>",
    )
    latitude: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    longitude: Optional[float] = Field(default=None, ge=-180.0, le=180.0)
    voice: Literal["male", "female"] = "female"

    @model_validator(mode="after")
    def _coordinates_come_in_pairs(self) -> ScanIn:
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        return self


class ScanOut(_CamelModel):
    scan_id: str = Field(serialization_alias="scanId")
    scene_description: str = Field(serialization_alias="sceneDescription")
    tts_audio_data_uri: str = Field(serialization_alias="ttsAudioDataUri")
    location: Optional[str] = None


class DescribeIn(_CamelModel):
    photo_data_uri: str = Field(alias="photoDataUri")


class DescribeOut(_CamelModel):
    scene_description: str = Field(serialization_alias="sceneDescription")


class SpeechIn(_CamelModel):
    text: str = Field(min_length=1)
    voice: Literal["male", "female"] = "female"


class SpeechOut(_CamelModel):
    tts_audio_data_uri: str = Field(serialization_alias="ttsAudioDataUri")
