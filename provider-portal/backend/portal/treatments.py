"""
Treatment labels coming from the React UI (strings in suggestedTreatments[]).

每个 label 对应 patients 表里的一个 boolean 列。
匹配是精确字符串匹配，不认识的 label 直接忽略，不报错。
"""

TREATMENT_LABELS = {
    'tx_cbti': 'Cognitive Behavioral Therapy for Insomnia',
    'tx_cpap_comisa': 'CPAP Compliance Program for COMISA (Co-morbid Insomnia with Sleep Apnea)',
    'tx_sleep_eeg': 'Sleep EEG for Insomnia',
    'tx_zepbound_osa': 'Zepbound Rx for OSA',
    'tx_natural_products': 'Natural Products for Insomnia',
    'tx_insomnia_meds_mgmt': (
        'Insomnia Medications Management* '
        '(help patients treat insomnia without addictive medications)'
    ),
}

TREATMENT_FIELDS = tuple(TREATMENT_LABELS)


def treatments_to_flags(suggested_treatments):
    """Label 列表 → {tx_*: bool}。不是 list 的输入当成空列表。"""
    treatments = suggested_treatments if isinstance(suggested_treatments, list) else []
    return {field: label in treatments for field, label in TREATMENT_LABELS.items()}


def discrete_flags(data):
    """直接读请求里的 tx_* 字段（老版本前端的格式）。"""
    return {field: bool(data.get(field)) for field in TREATMENT_FIELDS}
