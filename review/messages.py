"""
Localized UI strings (English and Thai) for notifications and page labels.
"""

from typing import Dict, Optional

from review.config import SUPPORTED_LANGUAGES


MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "page_title": "Application Details",
        "subtitle": "View and evaluate film submission",
        "application_id_missing": "Application ID not found",
        "application_not_found": "Application not found",
        "load_error": "Error loading application data",
        "film_information": "Film Information",
        "contact_information": "Contact Information",
        "crew_table": "Crew Table",
        "proof_documents": "Proof Documents",
        "application_timeline": "Application Timeline",
        "nationality": "Nationality",
        "genres": "Genres",
        "duration": "Duration",
        "minutes": "min",
        "synopsis": "Synopsis",
        "chiangmai_connection": "Connection to Chiang Mai",
        "personal_details": "Personal Details",
        "educational_details": "Educational Details",
        "role_in_film": "Role in Film",
        "age": "Age",
        "years_old": "years old",
        "phone": "Phone",
        "email": "Email",
        "school": "School",
        "university": "University",
        "faculty": "Faculty/Department",
        "student_id": "Student ID",
        "crew_members": "Crew Members",
        "search_crew": "Search crew...",
        "sort_by": "Sort by",
        "name": "Name",
        "role": "Role",
        "contact": "Contact",
        "institution": "Institution",
        "total_crew": "Total Crew",
        "show_all": "Show All",
        "show_less": "Show Less",
        "more": "more",
        "no_crew": "No additional crew members",
        "export_crew": "Export Crew List",
        "film_file": "Film File",
        "poster_file": "Poster",
        "proof_file": "Proof Document",
        "file_size": "File Size",
        "verified": "Verified",
        "missing": "Missing File",
        "download": "Download",
        "preview": "Preview",
        "copy_link": "Copy Link",
        "draft_created": "Draft Created",
        "last_modified": "Last Modified",
        "submitted": "Submitted",
        "reviewed": "Reviewed",
        "average_score": "Average Score",
        "total_scores": "Total Judges",
        "scores": "scores",
        "last_reviewed": "Last Reviewed",
        "flagged": "Flagged",
        "review_status": "Review Status",
        "admin_notes": "Admin Notes",
        "export_pdf": "Export PDF",
        "toggle_sidebar": "Toggle sidebar",
        "scores_saved": "Scores saved successfully",
        "scores_error": "Error saving scores",
        "status_updated": "Status updated successfully",
        "status_error": "Error updating status",
        "notes_saved": "Notes saved successfully",
        "notes_error": "Error saving notes",
        "flag_set": "Application flagged successfully",
        "flag_cleared": "Application unflagged successfully",
        "flag_error": "Error updating flag status",
        "export_success": "Export Successful",
        "export_failed": "Export Failed",
        "file_unavailable": "File is not available",
        "unauthorized": "Please sign in to continue.",
        "technical": "Technical",
        "story": "Story",
        "creativity": "Creativity",
        "impact": "Impact",
        "total_score": "Total Score",
    },
    "th": {
        "page_title": "รายละเอียดใบสมัคร",
        "subtitle": "ดูและประเมินผลงานภาพยนตร์",
        "application_id_missing": "ไม่พบรหัสใบสมัคร",
        "application_not_found": "ไม่พบใบสมัครที่ระบุ",
        "load_error": "เกิดข้อผิดพลาดในการโหลดข้อมูล",
        "film_information": "ข้อมูลภาพยนตร์",
        "contact_information": "ข้อมูลติดต่อ",
        "crew_table": "ตารางทีมงาน",
        "proof_documents": "เอกสารหลักฐาน",
        "application_timeline": "ไทม์ไลน์การสมัคร",
        "nationality": "สัญชาติ",
        "genres": "แนวภาพยนตร์",
        "duration": "ความยาว",
        "minutes": "นาที",
        "synopsis": "เรื่องย่อ",
        "chiangmai_connection": "ความเกี่ยวข้องกับเชียงใหม่",
        "personal_details": "ข้อมูลส่วนตัว",
        "educational_details": "ข้อมูลการศึกษา",
        "role_in_film": "บทบาทในภาพยนตร์",
        "age": "อายุ",
        "years_old": "ปี",
        "phone": "โทรศัพท์",
        "email": "อีเมล",
        "school": "โรงเรียน",
        "university": "มหาวิทยาลัย",
        "faculty": "คณะ/สาขา",
        "student_id": "รหัสนักเรียน/นักศึกษา",
        "crew_members": "สมาชิกทีมงาน",
        "search_crew": "ค้นหาทีมงาน...",
        "sort_by": "เรียงตาม",
        "name": "ชื่อ",
        "role": "บทบาท",
        "contact": "ติดต่อ",
        "institution": "สถาบัน",
        "total_crew": "ทีมงานทั้งหมด",
        "show_all": "แสดงทั้งหมด",
        "show_less": "แสดงน้อยลง",
        "more": "เพิ่มเติม",
        "no_crew": "ไม่มีทีมงานเพิ่มเติม",
        "export_crew": "ส่งออกรายชื่อทีมงาน",
        "film_file": "ไฟล์ภาพยนตร์",
        "poster_file": "โปสเตอร์",
        "proof_file": "เอกสารหลักฐาน",
        "file_size": "ขนาดไฟล์",
        "verified": "ตรวจสอบแล้ว",
        "missing": "ไฟล์หายไป",
        "download": "ดาวน์โหลด",
        "preview": "ดูตัวอย่าง",
        "copy_link": "คัดลอกลิงก์",
        "draft_created": "สร้างร่าง",
        "last_modified": "แก้ไขล่าสุด",
        "submitted": "ส่งใบสมัคร",
        "reviewed": "พิจารณาแล้ว",
        "average_score": "คะแนนเฉลี่ย",
        "total_scores": "จำนวนผู้ตัดสิน",
        "scores": "คะแนน",
        "last_reviewed": "ตรวจสอบล่าสุด",
        "flagged": "ตั้งค่าสถานะพิเศษ",
        "review_status": "สถานะการพิจารณา",
        "admin_notes": "หมายเหตุผู้ดูแล",
        "export_pdf": "ส่งออก PDF",
        "toggle_sidebar": "เปิด/ปิดแถบด้านข้าง",
        "scores_saved": "บันทึกคะแนนเรียบร้อย",
        "scores_error": "เกิดข้อผิดพลาดในการบันทึก",
        "status_updated": "อัปเดตสถานะเรียบร้อย",
        "status_error": "เกิดข้อผิดพลาดในการอัปเดต",
        "notes_saved": "บันทึกหมายเหตุเรียบร้อย",
        "notes_error": "เกิดข้อผิดพลาดในการบันทึก",
        "flag_set": "ตั้งค่าสถานะพิเศษเรียบร้อย",
        "flag_cleared": "ยกเลิกสถานะพิเศษเรียบร้อย",
        "flag_error": "เกิดข้อผิดพลาด",
        "export_success": "ส่งออกสำเร็จ",
        "export_failed": "การส่งออกล้มเหลว",
        "file_unavailable": "ไม่พบไฟล์",
        "unauthorized": "กรุณาเข้าสู่ระบบ",
        "technical": "เทคนิค",
        "story": "เนื้อเรื่อง",
        "creativity": "ความคิดสร้างสรรค์",
        "impact": "ความประทับใจ",
        "total_score": "คะแนนรวม",
    },
}


def resolve_language(lang: Optional[str], default: str = "en") -> str:
    """Map a requested language tag (``th``, ``th-TH``, ``EN``) to a supported one."""
    if lang:
        tag = lang.split("-")[0].strip().lower()
        if tag in SUPPORTED_LANGUAGES:
            return tag
    return default


def get_message(key: str, lang: str = "en") -> str:
    """Look up a UI string, falling back to English, then to the key itself."""
    table = MESSAGES.get(lang, MESSAGES["en"])
    return table.get(key) or MESSAGES["en"].get(key, key)
