from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from app.core.config import settings
from app.core.exceptions import AppError
from app.core.logging import setup_logging, get_logger
from app.core.csrf import CSRFMiddleware, CSRF_HEADER
from app.core.security_headers import SecurityHeadersMiddleware
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.routers import health, auth, me, questions, answers, advisory_types

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """アプリケーションライフサイクル管理"""
    setup_logging(debug=settings.DEBUG)
    logger.info("アプリケーション起動")
    yield
    logger.info("アプリケーション終了")


app = FastAPI(
    title=settings.SITE_NAME,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# レート制限設定
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# --- バリデーションエラーのインドネシア語化 ---
_FIELD_ID = {
    "email": "Email",
    "password": "Password",
    "name": "Nama",
    "role": "Role",
    "divisi_instansi": "Divisi/Instansi Pemohon",
    "nama_pemohon": "Nama Pemohon",
    "unit_bisnis": "Unit Bisnis/Proyek/Anak Usaha",
    "data_informasi": "Data/Informasi Yang Diberikan",
    "advisory_diinginkan": "Advisory Yang Diinginkan",
    "jenis_advisory": "Jenis Advisory",
    "no_registrasi": "Nomor Registrasi",
    "technical_advisory_note": "Technical Advisory Note",
    "status": "Status",
    "sort_by": "Urutan",
    "search": "Pencarian",
    "date_from": "Tanggal awal",
    "date_to": "Tanggal akhir",
    "page": "Halaman",
    "question_id": "ID pertanyaan",
    "answer_id": "ID jawaban",
}


def _translate_error(err: dict) -> str:
    t = err.get("type", "")
    ctx = err.get("ctx", {})
    loc = err.get("loc", [])
    field = str(loc[-1]) if loc else ""
    # リスト要素のエラーはlocの末尾がインデックスになる
    if field.isdigit() and len(loc) > 1:
        field = str(loc[-2])
    label = _FIELD_ID.get(field, field)

    if field == "email" and t not in ("missing", "string_type"):
        return f"{label} tidak valid"
    if t == "missing":
        return f"{label} harus diisi"
    if t == "string_too_short":
        return f"{label} minimal {ctx.get('min_length', '')} karakter"
    if t == "string_too_long":
        return f"{label} maksimal {ctx.get('max_length', '')} karakter"
    if t in ("int_parsing", "int_type"):
        return f"{label} harus berupa angka"
    if t == "greater_than_equal":
        return f"{label} minimal {ctx.get('ge', '')}"
    if t in ("date_parsing", "date_from_datetime_parsing", "date_type"):
        return f"{label} harus berupa tanggal (YYYY-MM-DD)"
    if t in ("literal_error", "enum"):
        return f"{label} tidak valid"
    if t in ("string_type", "list_type"):
        return f"{label} tidak valid"
    return f"{label}: input tidak valid"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = [_translate_error(e) for e in exc.errors()]
    return JSONResponse(status_code=422, content={"error": ", ".join(messages)})


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# ミドルウェア (登録順序: 後に登録したものが先に実行される)
# セキュリティヘッダー（最初に実行されるよう最後に登録）
app.add_middleware(SecurityHeadersMiddleware)

# CSRF保護
app.add_middleware(CSRFMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[CSRF_HEADER],
)

# ルーター登録
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(me.router)
app.include_router(advisory_types.router)
app.include_router(questions.router)
app.include_router(answers.router)
