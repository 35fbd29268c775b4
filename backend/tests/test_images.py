"""
Tests for evidence photo upload and listing.

Endpoints tested:
- POST /api/upload/upload
- GET  /api/upload/session/{id}/images

Cloudinary is replaced by the FakeStorage fixture from conftest.
"""

JPEG = b"\xff\xd8\xff\xe0fake-jpeg-body"


def upload(client, account, session_id, content=JPEG, filename="proof.jpg", content_type="image/jpeg"):
    return client.post(
        "/api/upload/upload",
        data={"sessionId": str(session_id)},
        files={"image": (filename, content, content_type)},
        headers=account.headers,
    )


class TestUpload:
    def test_doctor_photographs_material(self, client, doctor, patient, ledger, storage):
        material = ledger.start_material(doctor, patient)

        response = upload(client, doctor, material["id"])
        assert response.status_code == 200
        image = response.json()["image"]
        assert image["sessionId"] == material["id"]
        assert image["uploadedBy"] == "doctor"
        assert image["uploaderId"] == doctor.id
        assert image["imageUrl"] == "https://res.cloudinary.test/dialysis_app/proof-1.jpg"
        assert image["publicId"] == "dialysis_app/proof-1"

        assert storage.uploads == [{"filename": "proof.jpg", "content": JPEG, "content_type": "image/jpeg"}]

    def test_uploaded_image_is_listed(self, client, doctor, patient, ledger):
        material = ledger.start_material(doctor, patient)
        dialysis_id = ledger.start_dialysis(patient, material["id"]).json()["session"]["id"]
        stored = upload(client, patient, dialysis_id).json()["image"]

        response = client.get(f"/api/upload/session/{dialysis_id}/images", headers=doctor.headers)
        assert response.status_code == 200
        images = response.json()["images"]
        assert len(images) == 1
        assert images[0]["imageUrl"] == stored["imageUrl"]
        assert images[0]["publicId"] == stored["publicId"]

    def test_images_appear_in_material_summary(self, client, doctor, patient, ledger):
        material = ledger.start_material(doctor, patient)
        upload(client, doctor, material["id"])
        dialysis_id = ledger.start_dialysis(patient, material["id"]).json()["session"]["id"]
        upload(client, patient, dialysis_id)

        summary = client.post(
            "/api/upload/patient/material-summary", json={}, headers=patient.headers,
        ).json()
        allotment = summary["materialSessions"][0]
        assert [i["publicId"] for i in allotment["materialImages"]] == ["dialysis_app/proof-1"]
        assert [i["publicId"] for i in allotment["dialysisSessions"][0]["images"]] == ["dialysis_app/proof-2"]

    def test_non_owner_is_forbidden(self, client, doctor, patient, other_patient, ledger, storage):
        material = ledger.start_material(doctor, patient)

        response = upload(client, other_patient, material["id"])
        assert response.status_code == 403
        assert response.json() == {"message": "Forbidden: patient not owner of session"}
        assert storage.uploads == []

    def test_other_doctor_is_forbidden(self, client, doctor, other_doctor, patient, ledger):
        material = ledger.start_material(doctor, patient)
        response = upload(client, other_doctor, material["id"])
        assert response.status_code == 403
        assert response.json() == {"message": "Forbidden: doctor not owner of session"}

    def test_unknown_session(self, client, doctor):
        response = upload(client, doctor, 9999)
        assert response.status_code == 404
        assert response.json() == {"message": "Session not found"}

    def test_missing_session_id(self, client, doctor):
        response = client.post(
            "/api/upload/upload",
            files={"image": ("proof.jpg", JPEG, "image/jpeg")},
            headers=doctor.headers,
        )
        assert response.status_code == 400
        assert response.json() == {"message": "sessionId is required"}

    def test_missing_file(self, client, doctor, patient, ledger):
        material = ledger.start_material(doctor, patient)
        response = client.post(
            "/api/upload/upload", data={"sessionId": str(material["id"])}, headers=doctor.headers,
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Image file is required"}

    def test_non_image_rejected(self, client, doctor, patient, ledger, storage):
        material = ledger.start_material(doctor, patient)
        response = upload(client, doctor, material["id"], content=b"%PDF-1.4", filename="notes.pdf",
                          content_type="application/pdf")
        assert response.status_code == 400
        assert response.json() == {"message": "Uploaded file must be an image"}
        assert storage.uploads == []

    def test_empty_file_rejected(self, client, doctor, patient, ledger):
        material = ledger.start_material(doctor, patient)
        response = upload(client, doctor, material["id"], content=b"")
        assert response.status_code == 400
        assert response.json() == {"message": "Image file is empty"}

    def test_storage_failure_leaves_no_record(self, client, doctor, patient, ledger, storage):
        material = ledger.start_material(doctor, patient)
        storage.fail = True

        response = upload(client, doctor, material["id"])
        assert response.status_code == 500
        assert response.json() == {"message": "Image upload failed"}

        listed = client.get(f"/api/upload/session/{material['id']}/images", headers=doctor.headers)
        assert listed.json()["images"] == []

    def test_requires_auth(self, client):
        response = client.post("/api/upload/upload", data={"sessionId": "1"})
        assert response.status_code == 401


class TestListImages:
    def test_listed_oldest_first(self, client, doctor, patient, ledger):
        material = ledger.start_material(doctor, patient)
        upload(client, doctor, material["id"], filename="a.jpg")
        upload(client, doctor, material["id"], filename="b.jpg")

        response = client.get(f"/api/upload/session/{material['id']}/images", headers=patient.headers)
        assert response.status_code == 200
        assert [i["publicId"] for i in response.json()["images"]] == [
            "dialysis_app/proof-1",
            "dialysis_app/proof-2",
        ]

    def test_foreign_patient_cannot_list(self, client, doctor, patient, foreign_patient, ledger):
        material = ledger.start_material(doctor, patient)
        response = client.get(f"/api/upload/session/{material['id']}/images", headers=foreign_patient.headers)
        assert response.status_code == 403

    def test_unknown_session(self, client, doctor):
        response = client.get("/api/upload/session/9999/images", headers=doctor.headers)
        assert response.status_code == 404
