# v1.0
import logging
import math
import numpy as np
from typing import Optional, Sequence, Union

logger = logging.getLogger(__name__)

SignalLike = Union[np.ndarray, Sequence[float]]

DEFAULT_THRESHOLD = 0.1


def compute_difference(data: np.ndarray) -> np.ndarray:
    """
    差分関数 (Difference Function)。
    d(tau) = sum_{j=0}^{H-1} (x[j] - x[j+tau])^2,  H = floor(N * 0.5)
    戻り値の長さは H + 1 (tau = 0 ... H)。
    """
    half_len = int(math.floor(len(data) * 0.5))
    template = data[:half_len]
    result = np.zeros(half_len + 1, dtype=np.float64)

    for lag in range(half_len + 1):
        delta = template - data[lag : lag + half_len]
        result[lag] = np.sum(delta * delta)

    return result


def compute_cumulative_mean_normalized_difference(diff: np.ndarray) -> np.ndarray:
    """
    累積平均正規化差分関数 (CMNDF)。
    cmnd(tau) = d(tau) / (sum_{k=0}^{tau} d(k) / tau)

    tau=0 は 0 / (0 / 0) = NaN になる。NaN との比較は常に False なので
    閾値探索で選ばれることはない。ここでは値を書き換えない。
    """
    running_sum = np.cumsum(diff)
    lags = np.arange(len(diff), dtype=np.float64)
    with np.errstate(divide='ignore', invalid='ignore'):
        return diff / (running_sum / lags)


def find_first_below_threshold(cmnd: np.ndarray, threshold: float) -> Optional[int]:
    """閾値を最初に下回るラグ。見つからなければ None。"""
    with np.errstate(invalid='ignore'):
        candidates = np.flatnonzero(cmnd < threshold)
    if len(candidates) == 0:
        return None
    return int(candidates[0])


def find_best_local_estimate(cmnd: np.ndarray, lag: int) -> Optional[int]:
    # 閾値を下回った地点から局所最小値まで進む (Global Min へのフォールバックはしない)
    for index in range(lag + 1, len(cmnd)):
        if cmnd[index] >= cmnd[index - 1]:
            return index - 1
    return None


def perform_interpolation(diff: np.ndarray, lag: int) -> float:
    """
    放物線補間 (Parabolic Interpolation)。
    CMNDF ではなく生の差分関数 diff に対して行う。
    端 (lag=0, lag=len-1) では隣接点が lag 自身に縮退するが、特別扱いはせず
    IEEE-754 の結果 (inf / NaN) をそのまま返す。
    """
    prev = lag if lag < 1 else lag - 1
    nxt = lag + 1 if lag + 1 < len(diff) else lag

    val_prev = np.float64(diff[prev])
    val_lag = np.float64(diff[lag])
    val_next = np.float64(diff[nxt])

    with np.errstate(divide='ignore', invalid='ignore'):
        slope = (val_next - val_prev) / np.float64(nxt - prev)
        return float(lag + slope / (2 * val_lag - val_prev - val_next))


def _validate(signal: np.ndarray, sample_rate: float, threshold: float):
    if signal.ndim != 1:
        raise ValueError(f"signal must be one-dimensional (got shape {signal.shape})")
    if len(signal) < 2:
        raise ValueError(f"signal must contain at least 2 samples (got {len(signal)})")
    if not (math.isfinite(sample_rate) and sample_rate > 0):
        raise ValueError(f"sample_rate must be a positive finite number (got {sample_rate})")
    if not math.isfinite(threshold):
        raise ValueError(f"threshold must be a finite number (got {threshold})")


def estimate_fundamental_frequency(data: SignalLike,
                                   sample_rate: float,
                                   threshold: float = DEFAULT_THRESHOLD) -> Optional[float]:
    """
    YINアルゴリズムによる基本周波数の推定。

    de Cheveigné & Kawahara, "YIN, a fundamental frequency estimator for
    speech and music" (2002) に基づく。ただし閾値通過後に局所最小値が
    見つからない場合、全体の最小値 (Global Min) は使わずに None を返す。

    Args:
        data: 時間領域の信号 (1次元)。呼び出し側の配列は変更しない。
        sample_rate: サンプリング周波数 (Hz)。
        threshold: CMNDF の閾値。デフォルト 0.1。

    Returns:
        推定された基本周波数 (Hz)。推定できない場合は None。

    Raises:
        ValueError: 信号が 2 サンプル未満、1次元でない、または
                    sample_rate / threshold が不正な場合。
    """
    signal = np.asarray(data, dtype=np.float64)
    _validate(signal, sample_rate, threshold)

    diff = compute_difference(signal)
    cmnd = compute_cumulative_mean_normalized_difference(diff)

    tau = find_first_below_threshold(cmnd, threshold)
    if tau is None:
        logger.debug(f"YIN: no lag below threshold {threshold} (N={len(signal)})")
        return None

    best_estimate = find_best_local_estimate(cmnd, tau)
    if best_estimate is None:
        logger.debug(f"YIN: no local minimum after lag {tau}")
        return None

    interpolated_lag = perform_interpolation(diff, best_estimate)
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.float64(sample_rate) / np.float64(interpolated_lag))


class YinProcessor:
    """
    YIN によるピッチ検出を行うクラス。
    設定値 (sample_rate, threshold) のみを保持し、呼び出しごとの作業領域は
    毎回確保するため、同一インスタンスを複数スレッドから呼んでも安全。
    """
    def __init__(self, sample_rate: float, threshold: float = DEFAULT_THRESHOLD):
        if not (math.isfinite(sample_rate) and sample_rate > 0):
            raise ValueError(f"sample_rate must be a positive finite number (got {sample_rate})")
        if not math.isfinite(threshold):
            raise ValueError(f"threshold must be a finite number (got {threshold})")
        self.sample_rate = float(sample_rate)
        self.threshold = float(threshold)

    def process(self, signal: SignalLike) -> Optional[float]:
        """信号から基本周波数を返す。None は検出不能を意味する。"""
        return estimate_fundamental_frequency(signal, self.sample_rate, self.threshold)
