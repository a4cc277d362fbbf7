"""Keyword groups and canned answers for the chat bot.

Keywords are matched as lower-cased substrings. The contact answers are
rendered from the shop's configured hotlines, e-mail and address.
"""

from shared.settings import get_settings

KNOWLEDGE_BASE = {
    "greeting": ["xin chào", "chào", "hello", "hi", "hey", "chào bạn", "chào shop"],
    "products": ["sản phẩm", "hàng", "có gì", "bán gì", "mua", "giá", "bao nhiêu", "giá cả"],
    "category": [
        "ghế",
        "bàn",
        "tủ",
        "giường",
        "kệ",
        "sofa",
        "văn phòng",
        "phòng khách",
        "phòng ngủ",
    ],
    "delivery": ["giao hàng", "ship", "vận chuyển", "ship cod", "miễn phí", "phí ship"],
    "contact": ["liên hệ", "số điện thoại", "sdt", "địa chỉ", "hotline", "zalo", "facebook"],
    "support": ["tư vấn", "hỗ trợ", "giúp đỡ", "help", "admin", "nhân viên"],
    "thanks": ["cảm ơn", "thanks", "thank you", "cám ơn", "ok"],
}

# Matching order; the first group with a hit wins
INTENT_ORDER = ("greeting", "products", "category", "delivery", "contact", "support", "thanks")

BOT_RESPONSES = {
    "greeting": [
        "Xin chào! 👋 Tôi là bot tự động của cửa hàng. Tôi có thể giúp gì cho bạn?",
        "Chào bạn! 😊 Cảm ơn bạn đã quan tâm đến sản phẩm của chúng tôi. Bạn cần tư vấn gì?",
        "Hi! Rất vui được hỗ trợ bạn. Bạn đang tìm loại nội thất nào?",
    ],
    "products": [
        "Chúng tôi chuyên cung cấp:\n• Ghế văn phòng\n• Bàn làm việc\n• Tủ hồ sơ\n"
        "• Ghế giám đốc\n• Kệ sách\n• Sofa văn phòng\n\nBạn quan tâm loại nào ạ?",
        "Shop có đầy đủ các loại nội thất văn phòng và gia đình:\n✓ Ghế xoay, ghế lưới\n"
        "✓ Bàn làm việc, bàn họp\n✓ Tủ tài liệu\n✓ Kệ trưng bày\n\n"
        "Giá cả cạnh tranh, chất lượng đảm bảo! 💪",
    ],
    "delivery": [
        "Về vận chuyển:\n📦 FREE SHIP nội thành HCM cho đơn từ 2 triệu\n🚚 Giao hàng toàn quốc\n"
        "⏰ Giao hàng trong 1-3 ngày\n💯 Hỗ trợ lắp đặt tận nơi",
        "Chúng tôi giao hàng:\n✓ HCM: 1-2 ngày\n✓ Các tỉnh: 3-5 ngày\n"
        "✓ Miễn phí ship đơn > 2tr\n✓ COD toàn quốc",
    ],
    "support": [
        "Để được tư vấn chi tiết, admin sẽ hỗ trợ bạn ngay! Vui lòng chờ trong giây lát... ⏰",
        "Tôi đang kết nối bạn với nhân viên tư vấn. Xin vui lòng đợi 1-2 phút nhé! 😊",
    ],
    "thanks": [
        "Rất vui được hỗ trợ bạn! 😊 Nếu cần gì thêm cứ nhắn tin nhé!",
        "Không có gì! Chúc bạn một ngày tốt lành! 🌟",
        "Cảm ơn bạn đã quan tâm! Hẹn gặp lại! 👋",
    ],
}

CATEGORY_RESPONSES = {
    "ghế": "Về ghế, shop có nhiều loại:\n• Ghế văn phòng lưới\n• Ghế giám đốc cao cấp\n"
    "• Ghế chân quỳ\n• Ghế xoay 360°\n\nGiá từ 500k - 5tr. Bạn cần ghế loại nào?",
    "bàn": "Về bàn làm việc, có các dòng:\n• Bàn văn phòng cơ bản\n• Bàn giám đốc\n"
    "• Bàn họp\n• Bàn máy tính\n\nGiá từ 800k - 10tr tùy kích thước.",
    "tủ": "Về tủ, shop có:\n• Tủ hồ sơ 2-4 ngăn\n• Tủ tài liệu gỗ\n• Tủ sắt\n"
    "• Tủ đồ cá nhân\n\nGiá từ 1tr - 8tr.",
}


def contact_responses() -> list[str]:
    settings = get_settings()
    hotlines = settings.shop_hotlines
    return [
        f"📞 Hotline: {' - '.join(hotlines)}\n📧 Email: {settings.shop_email}\n"
        f"📍 Địa chỉ: {settings.shop_address}\n💬 Zalo: {settings.shop_zalo}",
        "Liên hệ chúng tôi:\n"
        + "".join(f"📞 {hotline}\n" for hotline in hotlines)
        + f"📧 {settings.shop_email}\n🏢 {settings.shop_address}",
    ]


def default_responses() -> list[str]:
    hotlines = get_settings().shop_hotlines
    hotline = hotlines[0] if hotlines else "hotline"
    return [
        "Tôi chưa hiểu rõ câu hỏi của bạn. Bạn có thể hỏi về:\n• Sản phẩm\n• Giá cả\n"
        "• Giao hàng\n• Liên hệ\n\nHoặc đợi admin tư vấn chi tiết nhé!",
        "Xin lỗi, tôi chưa có thông tin về vấn đề này. Admin sẽ hỗ trợ bạn sớm nhất! "
        f"Hoặc gọi {hotline} để được tư vấn ngay.",
        f"Để được tư vấn chính xác, vui lòng liên hệ {hotline} hoặc đợi admin trả lời nhé! 🙏",
    ]
