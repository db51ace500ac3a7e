"""
utils/constants.py

Purpose: Centralized static content

- Categories, locations and subscription tier defaults
- User-facing notification and admin e-mail templates
- Reusable marketplace constants

(Prevents hardcoding across the codebase)
"""

# ============================================================
# CATALOGUE
# ============================================================

CATEGORIES = [
    {"id": "1", "name": "Bất động sản", "icon": "🏠", "slug": "bat-dong-san"},
    {"id": "2", "name": "Xe cộ", "icon": "🚗", "slug": "xe-co"},
    {"id": "3", "name": "Đồ điện tử", "icon": "💻", "slug": "do-dien-tu"},
    {"id": "4", "name": "Đồ gia dụng, nội thất", "icon": "🛋️", "slug": "do-gia-dung-noi-that"},
    {"id": "5", "name": "Giải trí, Thể thao, Sở thích", "icon": "🎨", "slug": "giai-tri-the-thao-so-thich"},
    {"id": "6", "name": "Đồ dùng cá nhân", "icon": "👕", "slug": "do-dung-ca-nhan"},
    {"id": "7", "name": "Mẹ và bé", "icon": "👶", "slug": "me-va-be"},
    {"id": "8", "name": "Thú cưng", "icon": "🐕", "slug": "thu-cung"},
    {"id": "9", "name": "Đồ ăn, thực phẩm", "icon": "🍎", "slug": "do-an-thuc-pham"},
    {"id": "10", "name": "Tủ lạnh, máy lạnh, máy giặt", "icon": "❄️", "slug": "dien-lanh"},
    {"id": "11", "name": "Việc làm", "icon": "💼", "slug": "viec-lam"},
    {"id": "12", "name": "Dịch vụ, Du lịch", "icon": "✈️", "slug": "dich-vu-du-lich"},
    {"id": "13", "name": "Các loại khác", "icon": "📦", "slug": "cac-loai-khac"},
]

CATEGORY_IDS = {c["id"] for c in CATEGORIES}

LOCATIONS = [
    "Toàn quốc", "TP Hà Nội", "TP Huế", "Quảng Ninh", "Cao Bằng", "Lạng Sơn", "Lai Châu",
    "Điện Biên", "Sơn La", "Thanh Hóa", "Nghệ An", "Hà Tĩnh", "Tuyên Quang", "Lào Cai",
    "Thái Nguyên", "Phú Thọ", "Bắc Ninh", "Hưng Yên", "TP Hải Phòng", "Ninh Bình",
    "Quảng Trị", "TP Đà Nẵng", "Quảng Ngãi", "Gia Lai", "Khánh Hòa", "Lâm Đồng", "Đắk Lắk",
    "TPHCM", "Đồng Nai", "Tây Ninh", "TP Cần Thơ", "Vĩnh Long", "Đồng Tháp", "Cà Mau", "An Giang",
]

DEFAULT_LOCATION = "Toàn quốc"

# ============================================================
# PRICING & TIERS
# ============================================================

PUSH_LISTING_PRICE = 20000  # VND

VIP_LISTINGS_LIMIT = 10

DEFAULT_TIER_CONFIGS = {
    "free": {
        "name": "Gói Miễn Phí",
        "price": 0,
        "max_images": 3,
        "posts_per_day": 3,
        "auto_approve": False,
        "features": ["Đăng tối đa 3 ảnh", "Hiển thị tiêu chuẩn", "Hỗ trợ cộng đồng"],
    },
    "basic": {
        "name": "Gói Basic",
        "price": 99000,
        "max_images": 6,
        "posts_per_day": 10,
        "auto_approve": False,
        "features": ["Đăng tối đa 6 ảnh", "Huy hiệu VIP Bạc", "Ưu tiên hiển thị trung bình"],
    },
    "pro": {
        "name": "Gói Pro VIP",
        "price": 299000,
        "max_images": 10,
        "posts_per_day": 50,
        "auto_approve": True,
        "features": ["Đăng tối đa 10 ảnh", "Huy hiệu PRO VIP Vàng", "Ưu tiên hiển thị cao nhất", "Viền tin đăng nổi bật"],
    },
}

DEFAULT_SETTINGS = {
    "push_price": PUSH_LISTING_PRICE,
    "push_discount": 0,
    "tier_discount": 0,
    "tier_configs": DEFAULT_TIER_CONFIGS,
    "bank_name": "",
    "account_number": "",
    "account_name": "",
    "beneficiary_qr": None,
    "banner_slides": [],
}

# ============================================================
# UPLOADS
# ============================================================

# Raster formats only; SVG can carry script
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}

# ============================================================
# USERS
# ============================================================

DEFAULT_AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"
DEFAULT_USER_NAME = "Người dùng mới"

SEED_ID_PREFIX = "seed_"

# ============================================================
# NOTIFICATIONS
# ============================================================

LISTING_APPROVED_TITLE = "Tin đăng đã được duyệt"
LISTING_REJECTED_TITLE = "Tin đăng bị từ chối"
LISTING_STATUS_MESSAGE = 'Tin "{title}" của bạn đã được chuyển sang trạng thái {status}.'
LISTING_STATUS_LABELS = {"approved": "Đang hiển thị", "rejected": "Từ chối"}

DEPOSIT_APPROVED_TITLE = "Nạp tiền thành công"
DEPOSIT_APPROVED_MESSAGE = "Hệ thống đã cộng {amount} vào ví của bạn."
SUBSCRIPTION_APPROVED_TITLE = "Gói dịch vụ đã kích hoạt"
SUBSCRIPTION_APPROVED_MESSAGE = "Gói thành viên của bạn đã được nâng cấp thành công."

NEW_FOLLOWER_TITLE = "Có người theo dõi mới"
NEW_FOLLOWER_MESSAGE = "{name} đã bắt đầu theo dõi bạn."
ANONYMOUS_USER_NAME = "Một người dùng"

USER_REVIEW_TITLE = "Bạn nhận được đánh giá mới"
LISTING_REVIEW_TITLE = 'Tin "{title}" có đánh giá mới'
REVIEW_MESSAGE = '{author} đã chấm {rating} sao: "{comment}"'

NEW_MESSAGE_TITLE = "Tin nhắn mới từ {name}"
IMAGE_MESSAGE_PREVIEW = "[Hình ảnh]"

KYC_VERIFIED_TITLE = "Tài khoản đã được xác thực"
KYC_VERIFIED_MESSAGE = "Giấy tờ tùy thân của bạn đã được duyệt."
KYC_REJECTED_TITLE = "Xác thực tài khoản bị từ chối"
KYC_REJECTED_MESSAGE = "Giấy tờ tùy thân của bạn chưa hợp lệ. Vui lòng gửi lại."

# ============================================================
# ADMIN E-MAILS
# ============================================================

NEW_LISTING_EMAIL_SUBJECT = "[Tin Mới] {title} - Cần duyệt"
NEW_LISTING_EMAIL_HTML = """
<h3 style="color: #0066cc;">Có người đăng tin bán hàng mới!</h3>
<p><strong>Tiêu đề:</strong> {title}</p>
<p><strong>Giá:</strong> {price}</p>
<p><strong>Danh mục ID:</strong> {category}</p>
<p><strong>Người bán:</strong> {seller}</p>
<p>Vui lòng vào trang Admin để kiểm duyệt.</p>
"""

DEPOSIT_EMAIL_SUBJECT = "[NẠP TIỀN] {amount} qua {method}"
DEPOSIT_EMAIL_HTML = """
<h3 style="color:green">Có yêu cầu nạp tiền mới!</h3>
<p><strong>User ID:</strong> {user_id}</p>
<p><strong>Số tiền:</strong> {amount}</p>
<p><strong>Hình thức:</strong> {method}</p>
<p>Hãy kiểm tra tài khoản ngân hàng và duyệt giao dịch này trong Admin.</p>
"""

SUBSCRIPTION_TRANSFER_EMAIL_SUBJECT = "[VIP PENDING] Yêu cầu duyệt gói {tier}"
SUBSCRIPTION_TRANSFER_EMAIL_HTML = """
<h3>Yêu cầu nâng cấp VIP qua Chuyển khoản</h3>
<p><strong>User ID:</strong> {user_id}</p>
<p><strong>Gói:</strong> {tier}</p>
<p><strong>Số tiền:</strong> {amount}</p>
<p>Vui lòng kiểm tra ngân hàng và duyệt giao dịch.</p>
"""

WALLET_SUBSCRIPTION_EMAIL_SUBJECT = "[DOANH THU] User mua gói {tier}"
WALLET_SUBSCRIPTION_EMAIL_HTML = """
<h3 style="color:blue">Doanh thu mới từ Ví!</h3>
<p>User <strong>{user_id}</strong> đã mua gói <strong>{tier}</strong> bằng số dư ví.</p>
<p>Giá trị: {amount}.</p>
"""

PUSH_EMAIL_SUBJECT = "[DOANH THU] User đẩy tin"
PUSH_EMAIL_HTML = "User {user_id} vừa đẩy tin {listing_id}. Doanh thu: {amount}."
