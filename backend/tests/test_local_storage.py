import asyncio
import io

from starlette.datastructures import UploadFile

from app.storage.local_storage import LocalStorage


def make_upload(name, content=b"\x89PNG fake"):
    return UploadFile(file=io.BytesIO(content), filename=name)


def test_save_and_delete_image(tmp_path):
    storage = LocalStorage(upload_dir=str(tmp_path), url_prefix="/uploads")

    public_path = asyncio.run(storage.save_image(make_upload("lamp.png")))

    assert public_path.startswith("/uploads/")
    assert public_path.endswith("-lamp.png")
    assert storage.image_exists(public_path)
    assert storage.get_file_path(public_path).read_bytes() == b"\x89PNG fake"

    assert storage.delete_image(public_path) is True
    assert not storage.image_exists(public_path)
    # Already gone
    assert storage.delete_image(public_path) is False


def test_filename_is_sanitized():
    name = LocalStorage.make_filename("../../etc/my photo!.jpg")
    stamp, rand, rest = name.split("-", 2)

    assert stamp.isdigit() and rand.isdigit()
    assert rest == "my_photo_.jpg"


def test_non_local_paths_are_ignored(tmp_path):
    storage = LocalStorage(upload_dir=str(tmp_path), url_prefix="/uploads")
    outside = tmp_path.parent / "keep.txt"
    outside.write_text("keep")

    assert not storage.is_local("https://cdn.example.com/a.png")
    assert not storage.is_local("")
    assert storage.get_file_path("/uploads/../keep.txt") is None
    assert storage.delete_image("/uploads/../keep.txt") is False
    assert storage.delete_image("https://cdn.example.com/a.png") is False
    assert outside.exists()
