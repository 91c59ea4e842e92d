"""Image validation and the R2 upload helpers."""
import asyncio
import io

import pytest
from botocore.exceptions import ClientError
from fastapi import UploadFile

from vehicle_service.services import file_storage
from vehicle_service.services.file_storage import FileValidationError


class FakeR2Client:
    def __init__(self, fail_delete=False):
        self.objects = {}
        self.deleted = []
        self.fail_delete = fail_delete

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[Key] = (Body, ContentType)

    def delete_object(self, Bucket, Key):
        if self.fail_delete:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DeleteObject")
        self.deleted.append(Key)

    def generate_presigned_url(self, method, Params, ExpiresIn):
        return f"https://r2.example/{Params['Key']}?expires={ExpiresIn}"


@pytest.fixture
def r2(monkeypatch):
    fake = FakeR2Client()
    monkeypatch.setattr(file_storage, "get_r2_client", lambda: fake)
    return fake


@pytest.mark.parametrize("filename", ["car.jpg", "car.JPEG", "car.png", "car.gif", "car.webp"])
def test_allowed_extensions(filename):
    assert file_storage.validate_image(filename, 1024) == filename[filename.rindex("."):].lower()


@pytest.mark.parametrize(
    "filename,size,message",
    [
        ("car.bmp", 1024, "Invalid file type"),
        ("car", 1024, "Invalid file type"),
        ("car.png", 0, "select a file"),
        (None, 1024, "select a file"),
        ("car.png", 5 * 1024 * 1024 + 1, "exceeds 5MB"),
    ],
)
def test_rejected_uploads(filename, size, message):
    with pytest.raises(FileValidationError, match=message):
        file_storage.validate_image(filename, size)


def test_exactly_five_megabytes_is_accepted():
    assert file_storage.validate_image("car.png", 5 * 1024 * 1024) == ".png"


def test_build_key():
    key = file_storage.build_key("vehicles", ".png")

    assert key.startswith("uploads/vehicles/")
    assert key.endswith(".png")


def test_build_key_rejects_unknown_folder():
    with pytest.raises(FileValidationError):
        file_storage.build_key("../etc", ".png")


def test_upload_image_stores_object(r2):
    upload = UploadFile(file=io.BytesIO(b"png bytes"), filename="Car.PNG")

    key = asyncio.run(file_storage.upload_image(upload, "profiles"))

    assert key.startswith("uploads/profiles/")
    assert r2.objects[key] == (b"png bytes", "image/png")


def test_upload_image_validates_before_storing(r2):
    upload = UploadFile(file=io.BytesIO(b""), filename="car.png")

    with pytest.raises(FileValidationError):
        asyncio.run(file_storage.upload_image(upload, "vehicles"))
    assert r2.objects == {}


def test_delete_file(r2):
    assert file_storage.delete_file("uploads/vehicles/a.png") is True
    assert r2.deleted == ["uploads/vehicles/a.png"]


def test_delete_file_without_key():
    assert file_storage.delete_file(None) is False
    assert file_storage.delete_file("") is False


def test_delete_file_failure_is_reported(monkeypatch):
    monkeypatch.setattr(file_storage, "get_r2_client", lambda: FakeR2Client(fail_delete=True))

    assert file_storage.delete_file("uploads/vehicles/a.png") is False


def test_image_url_without_credentials():
    assert file_storage.image_url("uploads/vehicles/a.png") is None
    assert file_storage.image_url(None) is None


def test_image_url_with_credentials(r2, monkeypatch):
    monkeypatch.setattr(file_storage, "R2_ACCESS_KEY_ID", "key-id")

    url = file_storage.image_url("uploads/vehicles/a.png")

    assert url == "https://r2.example/uploads/vehicles/a.png?expires=3600"
