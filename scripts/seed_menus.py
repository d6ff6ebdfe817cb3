#!/usr/bin/env python3
import sys
import os

# Adds the project root to the path so we can import 'hrm'
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hrm.database import SessionLocal
from hrm.models.models import Menu, RoleMenu

MANAGEMENT = ['SUPER_ADMIN', 'ADMIN', 'HR_MANAGER']

# (label, href, icon, order, group, roles)
DEFAULT_MENUS = [
    ("Dashboard", "/dashboard", "LayoutDashboard", 1, "Menu Utama", MANAGEMENT + ['EMPLOYEE']),
    ("Absensi Saya", "/dashboard/attendance/my-attendance", "Calendar", 2, "Aktivitas", ['EMPLOYEE']),
    ("Pengajuan Cuti", "/dashboard/leaves/request", "FileText", 3, "Aktivitas", ['EMPLOYEE']),
    ("Lihat Slip Gaji", "/dashboard/payroll/my-slip", "DollarSign", 4, "Keuangan", ['EMPLOYEE']),
    ("Profil Saya", "/dashboard/profile", "User", 5, "Akun", ['EMPLOYEE']),
    ("Data Karyawan", "/dashboard/employees", "Users", 2, "HR Management", MANAGEMENT),
    ("Manajemen Absensi", "/dashboard/attendance", "CalendarRange", 3, "HR Management", MANAGEMENT),
    ("Payroll Processing", "/dashboard/payroll", "Banknote", 4, "Finance", MANAGEMENT),
    ("Laporan", "/dashboard/reports", "BarChart3", 5, "Analisis", MANAGEMENT),
    ("Pengaturan Sistem", "/dashboard/settings", "Settings", 99, "System", ['SUPER_ADMIN', 'ADMIN']),
]


def seed_menus():
    db = SessionLocal()
    try:
        print("🌱 Seeding menus...")
        for label, href, icon, order, group, roles in DEFAULT_MENUS:
            menu = db.query(Menu).filter(Menu.href == href).first()
            if menu is None:
                menu = Menu(href=href)
                db.add(menu)
                print(f"Created menu: {label}")
            menu.label = label
            menu.icon = icon
            menu.order = order
            menu.group_label = group
            db.flush()

            for role in roles:
                exists = db.query(RoleMenu).filter(RoleMenu.role == role, RoleMenu.menu_id == menu.id).first()
                if not exists:
                    db.add(RoleMenu(role=role, menu_id=menu.id))
        db.commit()
        print("✅ Seeding finished.")
    except Exception as e:
        db.rollback()
        print(f"❌ Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_menus()
