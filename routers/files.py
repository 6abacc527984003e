from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from deps.auth import require_teacher
from schemas.exercises import CsvFileList, CsvFileOut
from store import DocumentStore, get_store

router = APIRouter(prefix="/files", tags=["files"], dependencies=[Depends(require_teacher)])


@router.get("", response_model=CsvFileList)
def list_files(store: DocumentStore = Depends(get_store)):
    rows = [CsvFileOut.model_validate(f) for f in store.list_csv_files()]
    return {"ok": True, "items": rows, "count": len(rows)}


@router.get("/{file_id}/content")
def file_content(file_id: int, store: DocumentStore = Depends(get_store)):
    f = store.get_csv_file(file_id)
    if not f:
        raise HTTPException(status_code=404, detail="File not found")
    return PlainTextResponse(
        f.content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{f.file_name}"'},
    )


@router.delete("/{file_id}")
def delete_file(file_id: int, store: DocumentStore = Depends(get_store)):
    # Removes the upload record only; imported groups stay until the next upload.
    if not store.delete_csv_file(file_id):
        raise HTTPException(status_code=404, detail="File not found")
    return {"ok": True, "id": file_id}
