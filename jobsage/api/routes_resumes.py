from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..resumes.demo import is_demo_resume
from ..resumes.library import ResumeLibrary, format_file_size
from ..resumes.models import ResumeRecord, UploadedFile
from .deps import get_library

router = APIRouter(prefix="/api/resumes", tags=["resumes"])


class UploadRequest(BaseModel):
    files: list[UploadedFile]


def _serialize(record: ResumeRecord) -> dict:
    data = record.model_dump(mode="json")
    data["size_label"] = format_file_size(record.size)
    return data


@router.get("")
async def list_resumes(q: str = "", library: ResumeLibrary = Depends(get_library)):
    records = library.search(q)
    return {"resumes": [_serialize(r) for r in records], "count": len(records)}


@router.post("")
async def upload_resumes(req: UploadRequest, library: ResumeLibrary = Depends(get_library)):
    if not req.files:
        raise HTTPException(status_code=400, detail="No files provided")
    records, rejected = await library.upload(req.files)
    return {"uploaded": [_serialize(r) for r in records], "rejected": rejected}


@router.get("/{resume_id}")
async def get_resume(resume_id: str, library: ResumeLibrary = Depends(get_library)):
    record = library.get(resume_id)
    if not record:
        raise HTTPException(status_code=404, detail="Resume not found")
    return {"resume": _serialize(record)}


@router.delete("/{resume_id}")
async def remove_resume(resume_id: str, library: ResumeLibrary = Depends(get_library)):
    if is_demo_resume(resume_id):
        raise HTTPException(status_code=403, detail="Demo resumes cannot be removed")
    if library.remove(resume_id):
        return {"status": "deleted"}
    raise HTTPException(status_code=404, detail="Resume not found")
