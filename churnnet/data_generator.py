"""
Telco Customer Churn Data Generator
Creates synthetic data with the IBM Telco Customer Churn schema.

Churn is drawn from a logistic model whose log-odds contributions are
listed in CHURN_LOG_ODDS, so the true odds ratio of every driver is known
(odds ratio = exp(log-odds)). This makes the generator usable as a
ground truth for end-to-end checks of the pipeline.
"""

import numpy as np
import pandas as pd

from .config import ID_COLUMN, TARGET_COLUMN, POSITIVE_CLASS, NEGATIVE_CLASS


CHURN_LOG_ODDS = {
    'intercept': -1.2,
    'tenure_per_year': -0.45,
    'contract_month_to_month': 1.5,
    'contract_two_year': -1.3,
    'fiber_optic': 0.9,
    'no_online_security': 0.4,
    'no_tech_support': 0.4,
    'electronic_check': 0.7,
    'senior_citizen': 0.4,
    'partner': -0.3,
    'dependents': -0.3,
    'paperless_billing': 0.3,
}

INTERNET_SERVICES = ['OnlineSecurity', 'OnlineBackup', 'DeviceProtection',
                     'TechSupport', 'StreamingTV', 'StreamingMovies']

PAYMENT_METHODS = ['Electronic check', 'Mailed check',
                   'Bank transfer (automatic)', 'Credit card (automatic)']


def generate_customer_ids(n_samples: int, rng: np.random.RandomState) -> list:
    """Generate customer IDs in the format XXXX-XXXXX"""
    digits = rng.choice(list('0123456789'), size=(n_samples, 4))
    letters = rng.choice(list('ABCDEFGHIJKLMNOPQRSTUVWXYZ'), size=(n_samples, 5))
    return [f"{''.join(d)}-{''.join(l)}" for d, l in zip(digits, letters)]


def churn_log_odds(df: pd.DataFrame, log_odds: dict = None) -> np.ndarray:
    """
    Linear predictor of the churn model for a generated table.

    Parameters:
    -----------
    df : pd.DataFrame
        Table with the Telco schema (TotalCharges may be blank)
    log_odds : dict, optional
        Per-driver log-odds; defaults to CHURN_LOG_ODDS
    """
    lo = log_odds or CHURN_LOG_ODDS
    has_internet = df['InternetService'] != 'No'

    z = np.full(len(df), lo['intercept'])
    z += lo['tenure_per_year'] * df['tenure'].values / 12.0
    z += lo['contract_month_to_month'] * (df['Contract'] == 'Month-to-month').values
    z += lo['contract_two_year'] * (df['Contract'] == 'Two year').values
    z += lo['fiber_optic'] * (df['InternetService'] == 'Fiber optic').values
    z += lo['no_online_security'] * (has_internet & (df['OnlineSecurity'] == 'No')).values
    z += lo['no_tech_support'] * (has_internet & (df['TechSupport'] == 'No')).values
    z += lo['electronic_check'] * (df['PaymentMethod'] == 'Electronic check').values
    z += lo['senior_citizen'] * df['SeniorCitizen'].values
    z += lo['partner'] * (df['Partner'] == 'Yes').values
    z += lo['dependents'] * (df['Dependents'] == 'Yes').values
    z += lo['paperless_billing'] * (df['PaperlessBilling'] == 'Yes').values
    return z


def generate_telco_dataset(n_samples: int = 7043, random_state: int = 42,
                           blank_fraction: float = 0.5) -> pd.DataFrame:
    """
    Generate a synthetic Telco Customer Churn dataset.

    Parameters:
    -----------
    n_samples : int
        Number of customer records to generate
    random_state : int
        Random seed for reproducibility
    blank_fraction : float
        Share of zero-tenure customers whose TotalCharges is left blank,
        as in the public dataset

    Returns:
    --------
    pd.DataFrame
        Dataset with the Telco churn schema, customerID first and Churn last
    """
    rng = np.random.RandomState(random_state)

    customer_ids = generate_customer_ids(n_samples, rng)

    # Demographics
    gender = rng.choice(['Male', 'Female'], n_samples)
    senior_citizen = rng.choice([0, 1], n_samples, p=[0.84, 0.16])
    partner = rng.choice(['Yes', 'No'], n_samples, p=[0.48, 0.52])
    dependents = rng.choice(['Yes', 'No'], n_samples, p=[0.30, 0.70])

    # Tenure (months): mix of new customers and long-term loyal customers
    n_new = int(n_samples * 0.4)
    tenure = np.concatenate([
        rng.exponential(scale=8, size=n_new),
        rng.normal(loc=55, scale=15, size=n_samples - n_new),
    ])
    rng.shuffle(tenure)
    tenure = np.clip(tenure, 0, 72).astype(int)

    phone_service = rng.choice(['Yes', 'No'], n_samples, p=[0.90, 0.10])
    multiple_lines = np.where(
        phone_service == 'No',
        'No phone service',
        rng.choice(['Yes', 'No'], n_samples, p=[0.42, 0.58])
    )

    internet_service = rng.choice(['DSL', 'Fiber optic', 'No'], n_samples,
                                  p=[0.34, 0.44, 0.22])

    # Security and support are less common on fiber
    services = {}
    for col in INTERNET_SERVICES:
        p_yes = np.where(
            (internet_service == 'Fiber optic') & (col in ('OnlineSecurity', 'TechSupport')),
            0.35, 0.50
        )
        subscribed = rng.random_sample(n_samples) < p_yes
        services[col] = np.where(
            internet_service == 'No',
            'No internet service',
            np.where(subscribed, 'Yes', 'No')
        )

    contract = rng.choice(['Month-to-month', 'One year', 'Two year'], n_samples,
                          p=[0.55, 0.21, 0.24])
    paperless_billing = rng.choice(['Yes', 'No'], n_samples, p=[0.59, 0.41])
    payment_method = rng.choice(PAYMENT_METHODS, n_samples, p=[0.34, 0.23, 0.22, 0.21])

    # Monthly charges follow the subscribed services
    monthly = np.full(n_samples, 18.0)
    monthly += np.where(phone_service == 'Yes', 2.0, 0.0)
    monthly += np.where(multiple_lines == 'Yes', 5.0, 0.0)
    monthly += np.select([internet_service == 'DSL', internet_service == 'Fiber optic'],
                         [25.0, 45.0], 0.0)
    for col in INTERNET_SERVICES:
        monthly += np.where(services[col] == 'Yes', rng.uniform(8, 12, n_samples), 0.0)
    monthly += rng.normal(0, 3, n_samples)
    monthly_charges = np.round(np.maximum(monthly, 18.0), 2)

    # Total charges: slight historical discount plus noise, never below one month
    total = tenure * monthly_charges * 0.95 + rng.normal(0, 50, n_samples)
    total_charges = np.round(np.maximum(total, monthly_charges), 2)

    df = pd.DataFrame({
        ID_COLUMN: customer_ids,
        'gender': gender,
        'SeniorCitizen': senior_citizen,
        'Partner': partner,
        'Dependents': dependents,
        'tenure': tenure,
        'PhoneService': phone_service,
        'MultipleLines': multiple_lines,
        'InternetService': internet_service,
        **services,
        'Contract': contract,
        'PaperlessBilling': paperless_billing,
        'PaymentMethod': payment_method,
        'MonthlyCharges': monthly_charges,
        'TotalCharges': total_charges,
    })

    churn_prob = 1.0 / (1.0 + np.exp(-churn_log_odds(df)))
    df[TARGET_COLUMN] = np.where(rng.random_sample(n_samples) < churn_prob,
                                 POSITIVE_CLASS, NEGATIVE_CLASS)

    # New customers sometimes have blank TotalCharges (like the original dataset)
    new_customers = df.index[df['tenure'] == 0]
    n_blank = int(round(len(new_customers) * blank_fraction))
    if n_blank:
        blank_idx = rng.choice(new_customers, n_blank, replace=False)
        df['TotalCharges'] = df['TotalCharges'].astype(object)
        df.loc[blank_idx, 'TotalCharges'] = ' '

    return df
