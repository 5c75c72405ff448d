"""SQL access for the job tracker tables.

Every function runs one parameterized statement through ``execute_query`` and
lets ``StoreError`` propagate; callers decide whether a failure is fatal.
"""
from utils.database import execute_query

APPLICATION_COLUMNS = "applicationID, userID, roleID, applicationDate, deadline, status"


# ----------------------------------------------------------------------------
# Interview / status / notification operations used by the delivery pipeline
# ----------------------------------------------------------------------------

def insert_interview(application_id, interview_date, interview_mode, result="Pending"):
    interview_id = execute_query(
        """
        INSERT INTO Interview (applicationID, interviewDate, interviewMode, result)
        VALUES (%s, %s, %s, %s)
        """,
        (application_id, interview_date, interview_mode, result),
    )
    return get_interview(interview_id)


def get_interview(interview_id):
    return execute_query(
        "SELECT interviewID, applicationID, interviewDate, interviewMode, result FROM Interview WHERE interviewID = %s",
        (interview_id,),
        fetch_one=True,
    )


def get_application_status(application_id):
    row = execute_query(
        "SELECT status FROM JobApplication WHERE applicationID = %s",
        (application_id,),
        fetch_one=True,
    )
    if not row:
        return None
    # A NULL status is handled like any other non-terminal status
    return row.get("status") or ""


def set_application_status(application_id, status):
    execute_query(
        "UPDATE JobApplication SET status = %s WHERE applicationID = %s",
        (getattr(status, "value", status), application_id),
    )


def insert_notification(notification_type, date, time, application_id, admin_id=None):
    return execute_query(
        """
        INSERT INTO Notification (type, date, time, applicationID, adminID, delivered, isRead)
        VALUES (%s, %s, %s, %s, %s, 0, 0)
        """,
        (notification_type, date, time, application_id, admin_id),
    )


def query_undelivered_notifications():
    return execute_query(
        """
        SELECT n.notificationID, n.type, n.date, n.time, n.applicationID, n.adminID,
               a.userID AS ownerUserID
        FROM Notification n
        JOIN JobApplication a ON n.applicationID = a.applicationID
        WHERE n.delivered = 0
        ORDER BY n.notificationID ASC
        """,
        fetch_all=True,
    ) or []


def mark_notification_delivered(notification_id):
    execute_query(
        "UPDATE Notification SET delivered = 1 WHERE notificationID = %s",
        (notification_id,),
    )


# ----------------------------------------------------------------------------
# Notifications listing
# ----------------------------------------------------------------------------

def get_notification(notification_id):
    return execute_query(
        """
        SELECT notificationID, type, date, time, applicationID, adminID, delivered, isRead
        FROM Notification WHERE notificationID = %s
        """,
        (notification_id,),
        fetch_one=True,
    )


def list_notifications_for_user(user_id):
    return execute_query(
        """
        SELECT n.notificationID, n.type, n.date, n.time, n.applicationID, n.adminID,
               a.userID AS appUserID, r.roleTitle, c.companyName, n.delivered, n.isRead
        FROM Notification n
        LEFT JOIN JobApplication a ON n.applicationID = a.applicationID
        LEFT JOIN JobRole r ON a.roleID = r.roleID
        LEFT JOIN Company c ON r.companyID = c.companyID
        WHERE a.userID = %s
        ORDER BY n.notificationID DESC
        """,
        (user_id,),
        fetch_all=True,
    ) or []


def mark_notification_read(notification_id):
    execute_query(
        "UPDATE Notification SET isRead = 1 WHERE notificationID = %s",
        (notification_id,),
    )


def mark_all_notifications_read(user_id):
    execute_query(
        """
        UPDATE Notification SET isRead = 1
        WHERE isRead = 0
          AND applicationID IN (SELECT applicationID FROM JobApplication WHERE userID = %s)
        """,
        (user_id,),
    )


# ----------------------------------------------------------------------------
# Users and admins
# ----------------------------------------------------------------------------

def find_user_by_email(email):
    return execute_query(
        "SELECT userID, name, email, password, contact_info FROM `User` WHERE email = %s",
        (email,),
        fetch_one=True,
    )


def get_user(user_id):
    return execute_query(
        "SELECT userID, name, email, contact_info FROM `User` WHERE userID = %s",
        (user_id,),
        fetch_one=True,
    )


def create_user(name, email, password_hash, contact_info=""):
    user_id = execute_query(
        "INSERT INTO `User` (name, email, password, contact_info) VALUES (%s, %s, %s, %s)",
        (name, email, password_hash, contact_info),
    )
    return get_user(user_id)


def list_users():
    return execute_query(
        "SELECT userID, name, email, contact_info FROM `User` ORDER BY userID DESC",
        fetch_all=True,
    ) or []


def find_admin_by_email(email):
    return execute_query(
        "SELECT adminID, name, email, password FROM Admin WHERE email = %s",
        (email,),
        fetch_one=True,
    )


def create_admin(name, email, password_hash):
    return execute_query(
        "INSERT INTO Admin (name, email, password) VALUES (%s, %s, %s)",
        (name, email, password_hash),
    )


def set_admin_password(admin_id, password_hash):
    execute_query(
        "UPDATE Admin SET password = %s WHERE adminID = %s",
        (password_hash, admin_id),
    )


def list_admins():
    return execute_query(
        "SELECT adminID, name, email FROM Admin ORDER BY adminID ASC",
        fetch_all=True,
    ) or []


# ----------------------------------------------------------------------------
# Companies and job roles
# ----------------------------------------------------------------------------

def list_companies():
    return execute_query(
        "SELECT companyID, companyName, location, contactInfo, industry, city, country FROM Company ORDER BY companyID DESC",
        fetch_all=True,
    ) or []


def get_company(company_id):
    return execute_query(
        "SELECT companyID, companyName, location, contactInfo, industry, city, country FROM Company WHERE companyID = %s",
        (company_id,),
        fetch_one=True,
    )


def create_company(company_name, location="", contact_info="", industry="", city="", country=""):
    company_id = execute_query(
        """
        INSERT INTO Company (companyName, location, contactInfo, industry, city, country)
        VALUES (%s, %s, %s, %s, %s, %s)
        """,
        (company_name, location, contact_info, industry, city, country),
    )
    return get_company(company_id)


def list_job_roles():
    return execute_query(
        """
        SELECT r.roleID, r.companyID, r.roleTitle, r.jobType, r.description, r.salaryRange, r.location,
               c.companyName, c.location AS companyLocation
        FROM JobRole r
        LEFT JOIN Company c ON r.companyID = c.companyID
        ORDER BY r.roleID DESC
        """,
        fetch_all=True,
    ) or []


def get_job_role(role_id):
    return execute_query(
        "SELECT roleID, companyID, roleTitle, jobType, description, salaryRange, location FROM JobRole WHERE roleID = %s",
        (role_id,),
        fetch_one=True,
    )


def create_job_role(company_id, role_title, job_type="", description="", salary_range="", location=""):
    role_id = execute_query(
        """
        INSERT INTO JobRole (companyID, roleTitle, jobType, description, salaryRange, location)
        VALUES (%s, %s, %s, %s, %s, %s)
        """,
        (company_id, role_title, job_type, description, salary_range, location),
    )
    return get_job_role(role_id)


# ----------------------------------------------------------------------------
# Applications
# ----------------------------------------------------------------------------

def get_application(application_id):
    return execute_query(
        f"SELECT {APPLICATION_COLUMNS} FROM JobApplication WHERE applicationID = %s",
        (application_id,),
        fetch_one=True,
    )


def list_applications():
    return execute_query(
        """
        SELECT a.applicationID,
               a.userID,
               u.name AS userName,
               u.email AS userEmail,
               a.roleID,
               a.applicationDate,
               a.deadline,
               a.status,
               r.roleTitle,
               r.companyID AS roleCompanyID,
               c.companyName,
               c.location AS companyLocation
        FROM JobApplication a
        LEFT JOIN `User` u ON a.userID = u.userID
        LEFT JOIN JobRole r ON a.roleID = r.roleID
        LEFT JOIN Company c ON r.companyID = c.companyID
        ORDER BY a.applicationID DESC
        """,
        fetch_all=True,
    ) or []


def list_applications_for_user(user_id):
    return execute_query(
        """
        SELECT a.applicationID, a.userID, a.roleID, a.applicationDate, a.deadline, a.status,
               r.roleTitle, r.companyID AS roleCompanyID, c.companyName
        FROM JobApplication a
        LEFT JOIN JobRole r ON a.roleID = r.roleID
        LEFT JOIN Company c ON r.companyID = c.companyID
        WHERE a.userID = %s
        ORDER BY a.applicationID DESC
        """,
        (user_id,),
        fetch_all=True,
    ) or []


def create_application(user_id, role_id, application_date, deadline=None, status="Applied", resume=None, cover_letter=None):
    columns = ["userID", "roleID", "applicationDate", "deadline", "status"]
    params = [user_id, role_id, application_date, deadline, status]
    if resume:
        columns.append("resume")
        params.append(resume)
    if cover_letter:
        columns.append("coverLetter")
        params.append(cover_letter)

    placeholders = ", ".join(["%s"] * len(columns))
    application_id = execute_query(
        f"INSERT INTO JobApplication ({', '.join(columns)}) VALUES ({placeholders})",
        tuple(params),
    )
    return get_application(application_id)


def delete_application(application_id):
    execute_query("DELETE FROM JobApplication WHERE applicationID = %s", (application_id,))
