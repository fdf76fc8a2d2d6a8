"""ドメイン例外

サービス層はこれらを送出し、main.py のハンドラが {"error": message} に変換する。
"""


class AppError(Exception):
    """全ドメインエラーの基底"""

    status_code = 400
    default_message = "Terjadi kesalahan"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """入力検証エラー (書き込み前に検出)"""

    status_code = 400


class AuthenticationFailed(AppError):
    """ログイン失敗"""

    status_code = 401
    default_message = "Email atau password salah"


class Unauthenticated(AppError):
    """セッションなし・期限切れ"""

    status_code = 401
    default_message = "Unauthorized"


class Unauthorized(AppError):
    """ロール不一致"""

    status_code = 403
    default_message = "Unauthorized"


class NotFound(AppError):
    status_code = 404
    default_message = "Data tidak ditemukan"


class NotFoundOrAlreadyAnswered(NotFound):
    """存在しない / 他人の質問 / 回答済み を区別しない"""

    default_message = "Pertanyaan tidak ditemukan atau sudah dijawab"


class Conflict(AppError):
    status_code = 409


class OperationFailed(AppError):
    """DB障害など。呼び出し側には汎用メッセージのみ返す"""

    status_code = 500
    default_message = "Operasi gagal"
