"""Pydantic models for the GitHub releases API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ReleaseAsset(GitHubBaseModel):
    name: str
    download_url: str = Field(alias="browser_download_url")
    size: int | None = None


class Release(GitHubBaseModel):
    tag_name: str
    assets: list[ReleaseAsset] = Field(default_factory=list[ReleaseAsset])


class ErrorResponse(GitHubBaseModel):
    message: str = ""
