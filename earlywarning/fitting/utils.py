import numpy as np
from scipy import stats
from sklearn.metrics import r2_score, mean_squared_error


def calculate_r_squared(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Coefficient of determination; 0 when y_true has no variance."""
    y_true = np.asarray(y_true, dtype=float)
    if np.ptp(y_true) == 0:
        return 0.0
    return float(r2_score(y_true, np.asarray(y_pred, dtype=float)))


def calculate_residuals(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Mean squared error"""
    return float(mean_squared_error(y_true, y_pred))


def calculate_fit_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> tuple:
    """(MSE, R²) of a fitted curve"""
    return calculate_residuals(y_true, y_pred), calculate_r_squared(y_true, y_pred)


def assess_statistical_significance(y_true: np.ndarray, y_pred: np.ndarray, num_params: int = 7) -> dict:
    """
    Residual diagnostics of a fitted curve

    Args:
        y_true: observed log prices
        y_pred: fitted log prices
        num_params: number of fitted parameters (7 for LPPL: tc, m, ω, φ, A, B, C)

    Returns:
        dict with RMSE, F-test, residual normality test (n >= 8 only) and
        Durbin-Watson statistic
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    residuals = y_true - y_pred
    n = len(y_true)

    ss_res = float(np.sum(residuals ** 2))
    ss_tot = float(np.sum((y_true - np.mean(y_true)) ** 2))

    result = {
        'rmse': float(np.sqrt(ss_res / n)) if n > 0 else float('nan'),
        'f_test': {'statistic': None, 'p_value': None},
        'normality_test': {'statistic': None, 'p_value': None},
        'durbin_watson': None
    }

    dof_model = num_params - 1
    dof_resid = n - num_params
    if dof_resid > 0 and dof_model > 0 and ss_tot > 0:
        if ss_res > 0:
            f_stat = ((ss_tot - ss_res) / dof_model) / (ss_res / dof_resid)
            f_pvalue = float(stats.f.sf(f_stat, dof_model, dof_resid))
        else:
            f_stat, f_pvalue = float('inf'), 0.0
        result['f_test'] = {'statistic': float(f_stat), 'p_value': f_pvalue}

    # normaltest needs at least 8 samples and non-degenerate residuals
    if n >= 8 and np.ptp(residuals) > 0:
        normality_stat, normality_pvalue = stats.normaltest(residuals)
        result['normality_test'] = {'statistic': float(normality_stat),
                                    'p_value': float(normality_pvalue)}

    if ss_res > 0:
        result['durbin_watson'] = float(np.sum(np.diff(residuals) ** 2) / ss_res)

    return result
