"""アドバイザリー種別 (jenis_advisory) の固定リスト"""

ADVISORY_TYPES: dict[str, str] = {
    "01": "Penapisan/S.Arahan/PIL",
    "02": "KA ANDAL",
    "03": "ANDAL, RKL-RPL",
    "04": "Addendum ANDAL, RKL-RPL",
    "05": "UKL-UPL/DPLH/DELH/RKL Rinci",
    "06": "Pertek BMAL Sungai / BAP",
    "07": "Pertek BMAL Laut",
    "08": "Pertek / Clearance Emisi",
    "09": "Rintek LB3",
    "10": "Rintek Non B3",
    "11": "Andalalin",
    "12": "SLO (Air, Emisi, LB3)",
    "13": "Regulasi Lingkungan",
    "14": "Sharing Knowledge",
    "15": "Kemenhut (PPKH, RURH, R.DAS)",
    "16": "ESDM (RR, RPT)",
    "17": "Tata Ruang (KKPR, PKKPRL)",
    "18": "Amdalnet/SIMPEL",
    "19": "Lain - Lain",
}


def is_valid_advisory_code(code: str) -> bool:
    return code in ADVISORY_TYPES


def advisory_label(code: str) -> str:
    return ADVISORY_TYPES.get(code, code)
