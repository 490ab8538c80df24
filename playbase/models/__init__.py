from .data import (
    AccessToken,
    ArchiveDocument,
    LatestPointerDocument,
    LeaderboardDocument,
    MergeResult,
    RotationResult,
    ScoreEntry,
    SubmissionResult,
    VersionedDocument,
)
