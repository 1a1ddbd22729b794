from __future__ import annotations

import warnings
from dataclasses import dataclass, field

import numpy as np
from loguru import logger
from sklearn.cluster import KMeans
from sklearn.exceptions import ConvergenceWarning
from sklearn.metrics import silhouette_score
from sklearn.preprocessing import StandardScaler

from patternminer.mining.features import FeatureVector, feature_matrix
from patternminer.mining.models import MiningTuning

WORST_SCORE = -1.0


@dataclass(frozen=True)
class Cluster:
    label: int
    # Indices into the surviving window list, ascending.
    members: tuple[int, ...]
    support: float

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class ClusteringResult:
    clusters: list[Cluster]
    k: int
    score: float | None
    total: int
    candidate_scores: dict[int, float] = field(default_factory=dict)
    note: str | None = None


def candidate_cluster_counts(n_windows: int, tuning: MiningTuning) -> list[int]:
    lo = int(tuning.min_clusters)
    hi = min(int(tuning.max_clusters), max(lo, int(n_windows) // int(tuning.windows_per_cluster)))
    # silhouette needs at most n-1 labels
    hi = min(hi, int(n_windows) - 1)
    return list(range(lo, hi + 1))


def standardize(X: np.ndarray) -> np.ndarray:
    # Zero-variance columns keep scale 1 (StandardScaler), so they become all-zero.
    return StandardScaler().fit_transform(np.asarray(X, dtype=float))


def fit_labels(X: np.ndarray, k: int, *, random_state: int, n_init: int = 10) -> np.ndarray:
    with warnings.catch_warnings():
        # Duplicate points yield fewer distinct clusters than k; scored as degenerate below.
        warnings.simplefilter("ignore", ConvergenceWarning)
        km = KMeans(n_clusters=int(k), random_state=int(random_state), n_init=int(n_init))
        return np.asarray(km.fit_predict(X), dtype=int)


def cluster_quality(
    X: np.ndarray,
    labels: np.ndarray,
    *,
    sample_size: int | None = None,
    random_state: int | None = None,
) -> float:
    """Silhouette score, or WORST_SCORE when fewer than two clusters are populated."""

    n = int(X.shape[0])
    n_labels = int(np.unique(labels).size)
    if n_labels < 2 or n_labels >= n:
        return WORST_SCORE
    sample = int(sample_size) if sample_size is not None and int(sample_size) < n else None
    try:
        return float(silhouette_score(X, labels, sample_size=sample, random_state=random_state))
    except ValueError:
        # A subsample can land entirely inside one cluster.
        return WORST_SCORE


def cluster_windows(
    vectors: list[FeatureVector],
    *,
    min_support: float,
    tuning: MiningTuning,
    rng: np.random.Generator,
) -> ClusteringResult:
    n = len(vectors)
    if n < int(tuning.min_windows_for_clustering):
        logger.debug("clustering skipped: {n} windows < {m}", n=n, m=tuning.min_windows_for_clustering)
        return ClusteringResult(clusters=[], k=0, score=None, total=n, note="insufficient_data")

    candidates = candidate_cluster_counts(n, tuning)
    if not candidates:
        return ClusteringResult(clusters=[], k=0, score=None, total=n, note="degenerate_clustering")

    X = standardize(feature_matrix(vectors))
    # One draw seeds KMeans init and silhouette subsampling for every candidate k.
    random_state = int(rng.integers(0, 2**31 - 1))

    scores: dict[int, float] = {}
    labels_by_k: dict[int, np.ndarray] = {}
    for k in candidates:
        labels = fit_labels(X, k, random_state=random_state, n_init=tuning.kmeans_n_init)
        labels_by_k[k] = labels
        scores[k] = cluster_quality(X, labels, sample_size=tuning.silhouette_sample_size, random_state=random_state)

    best_k = candidates[int(np.argmax([scores[k] for k in candidates]))]
    best_score = scores[best_k]
    logger.debug("silhouette by k: {scores}", scores={k: round(v, 4) for k, v in scores.items()})
    if best_score <= WORST_SCORE:
        logger.info("clustering degenerate across k={lo}..{hi}", lo=candidates[0], hi=candidates[-1])
        return ClusteringResult(clusters=[], k=best_k, score=None, total=n, candidate_scores=scores, note="degenerate_clustering")

    # Same seed and data: identical to refitting at best_k.
    labels = labels_by_k[best_k]

    kept: list[Cluster] = []
    for label in np.unique(labels):
        members = np.flatnonzero(labels == label)
        support = float(members.size) / float(n)
        if support >= float(min_support) and members.size >= int(tuning.min_cluster_size):
            kept.append(Cluster(label=int(label), members=tuple(int(i) for i in members), support=support))

    logger.info(
        "clustering: k={k} silhouette={s:.3f} kept {kept}/{k} clusters",
        k=best_k,
        s=best_score,
        kept=len(kept),
    )
    return ClusteringResult(clusters=kept, k=best_k, score=best_score, total=n, candidate_scores=scores)
