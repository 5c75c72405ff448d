#!/usr/bin/env python3
"""
Database Initialization Script for the Job Application Tracker
Drops and recreates the schema, then optionally seeds an admin account.
"""

import mysql.connector
from mysql.connector import Error
import os
import sys
import argparse
from dotenv import load_dotenv
import logging
import time

from utils.auth import hash_password

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('database_init.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

# Creation order; dropped in reverse
TABLES = [
    ("User", """
        CREATE TABLE IF NOT EXISTS `User` (
            userID INT NOT NULL AUTO_INCREMENT,
            name VARCHAR(100) NOT NULL,
            email VARCHAR(100) NOT NULL,
            password VARCHAR(255) NOT NULL,
            contact_info VARCHAR(255) DEFAULT '',
            PRIMARY KEY (userID),
            UNIQUE KEY (email)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci
    """),
    ("Admin", """
        CREATE TABLE IF NOT EXISTS Admin (
            adminID INT NOT NULL AUTO_INCREMENT,
            name VARCHAR(100) NOT NULL,
            email VARCHAR(100) NOT NULL,
            password VARCHAR(255) NOT NULL,
            PRIMARY KEY (adminID),
            UNIQUE KEY (email)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci
    """),
    ("Company", """
        CREATE TABLE IF NOT EXISTS Company (
            companyID INT NOT NULL AUTO_INCREMENT,
            companyName VARCHAR(150) NOT NULL,
            location VARCHAR(150) DEFAULT '',
            contactInfo VARCHAR(255) DEFAULT '',
            industry VARCHAR(100) DEFAULT '',
            city VARCHAR(100) DEFAULT '',
            country VARCHAR(100) DEFAULT '',
            PRIMARY KEY (companyID)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci
    """),
    ("JobRole", """
        CREATE TABLE IF NOT EXISTS JobRole (
            roleID INT NOT NULL AUTO_INCREMENT,
            companyID INT NOT NULL,
            roleTitle VARCHAR(150) NOT NULL,
            jobType VARCHAR(50) DEFAULT '',
            description TEXT,
            salaryRange VARCHAR(100) DEFAULT '',
            location VARCHAR(150) DEFAULT '',
            PRIMARY KEY (roleID),
            FOREIGN KEY (companyID) REFERENCES Company(companyID) ON DELETE CASCADE
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci
    """),
    ("JobApplication", """
        CREATE TABLE IF NOT EXISTS JobApplication (
            applicationID INT NOT NULL AUTO_INCREMENT,
            userID INT NOT NULL,
            roleID INT NOT NULL,
            applicationDate DATE NOT NULL,
            deadline DATE DEFAULT NULL,
            status ENUM('Applied', 'Processing', 'Interview', 'Selected', 'Rejected', 'No Response') DEFAULT 'Applied',
            resume TEXT,
            coverLetter TEXT,
            PRIMARY KEY (applicationID),
            FOREIGN KEY (userID) REFERENCES `User`(userID) ON DELETE CASCADE,
            FOREIGN KEY (roleID) REFERENCES JobRole(roleID) ON DELETE CASCADE
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci
    """),
    ("Interview", """
        CREATE TABLE IF NOT EXISTS Interview (
            interviewID INT NOT NULL AUTO_INCREMENT,
            applicationID INT NOT NULL,
            interviewDate DATE NOT NULL,
            interviewMode ENUM('Online', 'Offline') NOT NULL,
            result ENUM('Pending', 'Passed', 'Failed') DEFAULT 'Pending',
            PRIMARY KEY (interviewID),
            FOREIGN KEY (applicationID) REFERENCES JobApplication(applicationID) ON DELETE CASCADE
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci
    """),
    ("Notification", """
        CREATE TABLE IF NOT EXISTS Notification (
            notificationID INT NOT NULL AUTO_INCREMENT,
            type VARCHAR(255) NOT NULL,
            date DATE NOT NULL,
            time TIME NOT NULL,
            applicationID INT NOT NULL,
            adminID INT DEFAULT NULL,
            delivered TINYINT(1) NOT NULL DEFAULT 0,
            isRead TINYINT(1) NOT NULL DEFAULT 0,
            PRIMARY KEY (notificationID),
            KEY idx_notification_delivered (delivered),
            FOREIGN KEY (applicationID) REFERENCES JobApplication(applicationID) ON DELETE CASCADE,
            FOREIGN KEY (adminID) REFERENCES Admin(adminID) ON DELETE SET NULL
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci
    """),
]


class DatabaseInitializer:
    def __init__(self, env_file='.env'):
        """Initialize with environment"""
        load_dotenv(env_file)

        # Database configuration
        self.host = os.getenv('MYSQL_HOST') or os.getenv('DB_HOST', 'localhost')
        self.user = os.getenv('MYSQL_USER') or os.getenv('DB_USER', 'root')
        self.password = os.getenv('MYSQL_PASSWORD') or os.getenv('DB_PASSWORD', '')
        self.database = os.getenv('MYSQL_DB') or os.getenv('DB_NAME', 'job_tracker')
        self.port = os.getenv('MYSQL_PORT') or os.getenv('DB_PORT', '3306')

        # Optional seed admin; skipped when either value is missing
        self.admin_email = os.getenv('ADMIN_EMAIL')
        self.admin_password = os.getenv('ADMIN_PASSWORD')

        logger.info(f"Using database: {self.database}")
        logger.info(f"Using MySQL user: {self.user}")

    def create_connection(self, use_database=True):
        """Create database connection"""
        try:
            config = {
                'host': self.host,
                'user': self.user,
                'password': self.password,
                'port': int(self.port),
                'connection_timeout': 30
            }

            if use_database:
                config['database'] = self.database

            return mysql.connector.connect(**config)
        except Error as e:
            logger.error(f"Connection error: {e}")
            raise

    def create_database(self):
        """Create the database itself if it does not exist yet"""
        connection = self.create_connection(use_database=False)
        cursor = connection.cursor()
        try:
            cursor.execute(
                f"CREATE DATABASE IF NOT EXISTS `{self.database}` "
                "DEFAULT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            )
            return True
        except Error as e:
            logger.error(f"Error creating database: {e}")
            return False
        finally:
            cursor.close()
            connection.close()

    def drop_all_tables(self):
        """Drop all existing tables"""
        connection = self.create_connection()
        cursor = connection.cursor()
        try:
            cursor.execute("SET FOREIGN_KEY_CHECKS = 0")
            for name, _ in reversed(TABLES):
                cursor.execute(f"DROP TABLE IF EXISTS `{name}`")
                logger.info(f"Dropped table {name}")
            cursor.execute("SET FOREIGN_KEY_CHECKS = 1")
            connection.commit()
            return True
        except Error as e:
            logger.error(f"Error dropping tables: {e}")
            return False
        finally:
            cursor.close()
            connection.close()

    def create_tables(self):
        """Create all database tables"""
        connection = self.create_connection()
        cursor = connection.cursor()
        try:
            logger.info("Creating tables...")
            for name, ddl in TABLES:
                cursor.execute(ddl)
                logger.info(f"Created table {name}")
            connection.commit()
            return True
        except Error as e:
            logger.error(f"Error creating tables: {e}")
            return False
        finally:
            cursor.close()
            connection.close()

    def insert_initial_data(self):
        """Seed the admin account when ADMIN_EMAIL and ADMIN_PASSWORD are set"""
        if not self.admin_email or not self.admin_password:
            logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping admin seed")
            return True

        connection = self.create_connection()
        cursor = connection.cursor()
        try:
            cursor.execute(
                "INSERT INTO Admin (name, email, password) VALUES (%s, %s, %s)",
                ('Administrator', self.admin_email.strip().lower(), hash_password(self.admin_password)),
            )
            connection.commit()
            logger.info(f"Seeded admin {self.admin_email}")
            return True
        except Error as e:
            logger.error(f"Error inserting initial data: {e}")
            connection.rollback()
            return False
        finally:
            cursor.close()
            connection.close()

    def verify_setup(self):
        """Check every table exists"""
        connection = self.create_connection()
        cursor = connection.cursor()
        try:
            cursor.execute("SHOW TABLES")
            existing = {row[0] for row in cursor.fetchall()}
            missing = [name for name, _ in TABLES if name not in existing]
            if missing:
                logger.error(f"Missing tables: {', '.join(missing)}")
                return False
            logger.info(f"All {len(TABLES)} tables present")
            return True
        finally:
            cursor.close()
            connection.close()

    def initialize(self, force=False):
        """Initialize database"""
        start_time = time.time()

        print("\n" + "=" * 60)
        print("JOB TRACKER DATABASE INITIALIZATION")
        print("=" * 60)
        print(f"Database: {self.database}")
        print(f"MySQL User: {self.user}")
        print("=" * 60)

        if not force:
            print("\n⚠️  WARNING: This will DROP ALL EXISTING TABLES!")
            confirm = input("Type 'YES' to continue: ").strip().upper()
            if confirm != 'YES':
                print("Operation cancelled")
                return False

        try:
            logger.info("Starting database initialization...")

            steps = [
                ("[1/4] Creating database...", self.create_database),
                ("[2/4] Dropping existing tables...", self.drop_all_tables),
                ("[3/4] Creating tables...", self.create_tables),
                ("[4/4] Inserting initial data...", self.insert_initial_data),
                ("[Verification] Verifying setup...", self.verify_setup),
            ]
            for label, step in steps:
                logger.info(label)
                if not step():
                    logger.error(f"Failed: {label}")
                    return False

            elapsed_time = time.time() - start_time
            print("\n" + "=" * 60)
            print("✅ DATABASE INITIALIZATION COMPLETE")
            print("=" * 60)
            print(f"Time: {elapsed_time:.2f} seconds")
            if self.admin_email:
                print(f"Admin Email: {self.admin_email}")
            print("=" * 60)
            return True

        except Exception as e:
            logger.error(f"Initialization failed: {e}", exc_info=True)
            return False


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description='Initialize job tracker database')
    parser.add_argument('--force', action='store_true', help='Skip confirmation')
    parser.add_argument('--env', default='.env', help='Environment file')

    args = parser.parse_args()

    try:
        initializer = DatabaseInitializer(env_file=args.env)
        sys.exit(0 if initializer.initialize(force=args.force) else 1)
    except KeyboardInterrupt:
        print("\nOperation cancelled")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
