"""
Tests for Complaint API Endpoints
"""
import uuid
from datetime import datetime

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select, func

from complaint_desk.main import app
from complaint_desk.models import Complaint, ComplaintAction, Notification
from complaint_desk.services.complaint_service import ComplaintService, ACTION_UPDATED


async def _action_count(db_session, complaint_id) -> int:
    return await db_session.scalar(
        select(func.count()).select_from(ComplaintAction)
        .where(ComplaintAction.complaint_id == complaint_id)
    )


class TestGetComplaint:

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(self, client: AsyncClient, admin_user, login_as):
        login_as(admin_user)

        response = await client.get(f'/api/v1/complaints/{uuid.uuid4()}')

        assert response.status_code == 404
        assert response.json() == {'error': 'Complaint not found'}

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, client: AsyncClient, admin_user, login_as):
        login_as(admin_user)

        response = await client.get('/api/v1/complaints/not-a-uuid')

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_admin_gets_denormalized_complaint(
        self, client: AsyncClient, admin_user, test_user, make_complaint, lookups, login_as
    ):
        complaint = await make_complaint(created_by=admin_user, assigned_to=test_user)
        login_as(admin_user)

        response = await client.get(f'/api/v1/complaints/{complaint.id}')

        assert response.status_code == 200
        data = response.json()
        assert data['id'] == str(complaint.id)
        assert data['complaintNumber'] == complaint.complaint_number
        assert data['policyType'] == 'General'
        assert data['channel'] == 'WEB'
        assert data['status'] == {'id': str(lookups['status'].id), 'name': 'Open'}
        assert data['type']['name'] == 'Claims'
        assert data['branch']['name'] == 'Head Office'
        assert data['lineOfBusiness']['name'] == 'Motor'
        assert data['createdBy'] == {'id': str(admin_user.id), 'name': admin_user.name}
        assert data['assignedTo'] == {'id': str(test_user.id), 'name': test_user.name}

    @pytest.mark.asyncio
    async def test_creator_and_assignee_can_read(
        self, client: AsyncClient, make_user, make_complaint, login_as
    ):
        creator = await make_user()
        assignee = await make_user()
        complaint = await make_complaint(created_by=creator, assigned_to=assignee)

        for user in (creator, assignee):
            login_as(user)
            response = await client.get(f'/api/v1/complaints/{complaint.id}')
            assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unrelated_user_is_forbidden(
        self, client: AsyncClient, make_user, make_complaint, login_as
    ):
        complaint = await make_complaint(created_by=await make_user(), assigned_to=await make_user())
        login_as(await make_user())

        response = await client.get(f'/api/v1/complaints/{complaint.id}')

        assert response.status_code == 403
        assert response.json() == {'error': 'Forbidden'}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic_500(
        self, client: AsyncClient, admin_user, monkeypatch, login_as
    ):
        async def broken_lookup(self, complaint_id):
            raise RuntimeError('connection reset by peer at 10.0.0.5')

        monkeypatch.setattr(ComplaintService, 'get_complaint_by_id', broken_lookup)
        login_as(admin_user)

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(
            transport=transport, base_url='http://test', cookies=client.cookies
        ) as raw_client:
            response = await raw_client.get(f'/api/v1/complaints/{uuid.uuid4()}')

        assert response.status_code == 500
        assert response.json() == {'error': 'Internal server error'}
        assert '10.0.0.5' not in response.text


class TestListComplaints:

    @pytest.mark.asyncio
    async def test_user_sees_only_assigned_complaints(
        self, client: AsyncClient, make_user, make_complaint, login_as
    ):
        user = await make_user()
        other = await make_user()
        assigned = await make_complaint(created_by=other, assigned_to=user)
        await make_complaint(created_by=user, assigned_to=other)
        await make_complaint(created_by=other)
        login_as(user)

        response = await client.get('/api/v1/complaints')

        assert response.status_code == 200
        data = response.json()
        assert data['total'] == 1
        assert [c['id'] for c in data['items']] == [str(assigned.id)]

    @pytest.mark.asyncio
    async def test_admin_sees_everything(
        self, client: AsyncClient, admin_user, make_user, make_complaint, login_as
    ):
        user = await make_user()
        await make_complaint(created_by=user, assigned_to=user)
        await make_complaint(created_by=user)
        login_as(admin_user)

        response = await client.get('/api/v1/complaints')

        assert response.json()['total'] == 2

    @pytest.mark.asyncio
    async def test_pagination(self, client: AsyncClient, admin_user, make_complaint, login_as):
        for _ in range(3):
            await make_complaint(created_by=admin_user)
        login_as(admin_user)

        response = await client.get('/api/v1/complaints', params={'page': 2, 'size': 2})

        data = response.json()
        assert data['total'] == 3
        assert data['pages'] == 2
        assert len(data['items']) == 1


class TestCreateComplaint:

    @pytest.mark.asyncio
    async def test_create_records_action(
        self, client: AsyncClient, db_session, test_user, complaint_payload, login_as
    ):
        login_as(test_user)

        response = await client.post('/api/v1/complaints', json=complaint_payload())

        assert response.status_code == 201
        data = response.json()
        assert data['complaintNumber'].startswith('CMP-')
        assert data['createdBy']['id'] == str(test_user.id)
        assert data['policyType'] == 'Comprehensive'
        assert data['channel'] == 'EMAIL'
        assert await _action_count(db_session, uuid.UUID(data['id'])) == 1

    @pytest.mark.asyncio
    async def test_create_missing_fields(self, client: AsyncClient, test_user, complaint_payload, login_as):
        login_as(test_user)

        response = await client.post(
            '/api/v1/complaints', json=complaint_payload(customerName='   ')
        )

        assert response.status_code == 400
        assert response.json() == {'error': 'Missing required fields'}

    @pytest.mark.asyncio
    async def test_create_notifies_assignee(
        self, client: AsyncClient, db_session, admin_user, test_user, complaint_payload, login_as
    ):
        login_as(admin_user)

        response = await client.post(
            '/api/v1/complaints', json=complaint_payload(assignedToId=str(test_user.id))
        )

        assert response.status_code == 201
        notifications = (await db_session.execute(
            select(Notification).where(Notification.user_id == test_user.id)
        )).scalars().all()
        assert len(notifications) == 1
        assert str(notifications[0].complaint_id) == response.json()['id']


class TestUpdateComplaint:

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(
        self, client: AsyncClient, admin_user, complaint_payload, login_as
    ):
        login_as(admin_user)

        for complaint_id in (uuid.uuid4(), 'not-a-uuid'):
            response = await client.put(
                f'/api/v1/complaints/{complaint_id}', json=complaint_payload()
            )
            assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unrelated_user_is_forbidden(
        self, client: AsyncClient, db_session, make_user, make_complaint, complaint_payload, login_as
    ):
        complaint = await make_complaint(created_by=await make_user())
        login_as(await make_user())

        response = await client.put(f'/api/v1/complaints/{complaint.id}', json=complaint_payload())

        assert response.status_code == 403
        assert await _action_count(db_session, complaint.id) == 0

    @pytest.mark.asyncio
    async def test_missing_description_writes_nothing(
        self, client: AsyncClient, db_session, test_user, make_complaint, complaint_payload, login_as
    ):
        complaint = await make_complaint(created_by=test_user)
        original_description = complaint.description
        payload = complaint_payload()
        del payload['description']
        login_as(test_user)

        response = await client.put(f'/api/v1/complaints/{complaint.id}', json=payload)

        assert response.status_code == 400
        assert response.json() == {'error': 'Missing required fields'}
        assert await _action_count(db_session, complaint.id) == 0

        await db_session.refresh(complaint)
        assert complaint.description == original_description

    @pytest.mark.asyncio
    async def test_update_writes_one_action(
        self, client: AsyncClient, db_session, test_user, make_complaint, complaint_payload, login_as
    ):
        complaint = await make_complaint(created_by=test_user)
        login_as(test_user)

        response = await client.put(
            f'/api/v1/complaints/{complaint.id}',
            json=complaint_payload(description='Customer called again'),
        )

        assert response.status_code == 200
        assert response.json()['description'] == 'Customer called again'
        assert response.json()['createdBy']['id'] == str(test_user.id)

        actions = (await db_session.execute(
            select(ComplaintAction).where(ComplaintAction.complaint_id == complaint.id)
        )).scalars().all()
        assert len(actions) == 1
        assert actions[0].user_id == test_user.id
        assert actions[0].description == ACTION_UPDATED

    @pytest.mark.asyncio
    async def test_sequential_updates_each_leave_an_action(
        self, client: AsyncClient, db_session, admin_user, test_user,
        make_complaint, complaint_payload, login_as,
    ):
        complaint = await make_complaint(created_by=admin_user, assigned_to=test_user)

        login_as(admin_user)
        first = await client.put(
            f'/api/v1/complaints/{complaint.id}',
            json=complaint_payload(description='First', assignedToId=str(test_user.id)),
        )
        login_as(test_user)
        second = await client.put(
            f'/api/v1/complaints/{complaint.id}',
            json=complaint_payload(description='Second', assignedToId=str(test_user.id)),
        )

        assert first.status_code == second.status_code == 200
        assert second.json()['description'] == 'Second'
        assert (
            datetime.fromisoformat(second.json()['updatedAt'])
            >= datetime.fromisoformat(first.json()['updatedAt'])
        )

        actions = (await db_session.execute(
            select(ComplaintAction)
            .where(ComplaintAction.complaint_id == complaint.id)
            .order_by(ComplaintAction.created_at)
        )).scalars().all()
        assert [a.user_id for a in actions] == [admin_user.id, test_user.id]

    @pytest.mark.asyncio
    async def test_reassignment_notifies_new_assignee(
        self, client: AsyncClient, db_session, admin_user, make_user,
        make_complaint, complaint_payload, login_as,
    ):
        first, second = await make_user(), await make_user()
        complaint = await make_complaint(created_by=admin_user, assigned_to=first)
        login_as(admin_user)

        await client.put(
            f'/api/v1/complaints/{complaint.id}',
            json=complaint_payload(assignedToId=str(second.id)),
        )

        recipients = (await db_session.execute(select(Notification.user_id))).scalars().all()
        assert recipients == [second.id]


class TestComplaintReferences:

    @pytest.mark.asyncio
    async def test_update_with_unknown_status_writes_nothing(
        self, client: AsyncClient, db_session, test_user, make_complaint, complaint_payload, login_as
    ):
        complaint = await make_complaint(created_by=test_user)
        complaint_id = complaint.id
        payload = complaint_payload(statusId=str(uuid.uuid4()))
        login_as(test_user)

        response = await client.put(f'/api/v1/complaints/{complaint_id}', json=payload)

        assert response.status_code == 400
        assert response.json() == {'error': 'Invalid reference'}
        assert await _action_count(db_session, complaint_id) == 0

        still_readable = await client.get(f'/api/v1/complaints/{complaint_id}')
        assert still_readable.status_code == 200
        assert still_readable.json()['status']['name'] == 'Open'

    @pytest.mark.asyncio
    async def test_create_with_unknown_branch_is_rejected(
        self, client: AsyncClient, db_session, test_user, complaint_payload, login_as
    ):
        payload = complaint_payload(branchId=str(uuid.uuid4()))
        login_as(test_user)

        response = await client.post('/api/v1/complaints', json=payload)

        assert response.status_code == 400
        assert response.json() == {'error': 'Invalid reference'}
        assert await db_session.scalar(select(func.count()).select_from(Complaint)) == 0

    @pytest.mark.asyncio
    async def test_blank_type_id_counts_as_missing(
        self, client: AsyncClient, db_session, test_user, make_complaint, complaint_payload, login_as
    ):
        complaint = await make_complaint(created_by=test_user)
        login_as(test_user)

        response = await client.put(
            f'/api/v1/complaints/{complaint.id}', json=complaint_payload(typeId='')
        )

        assert response.status_code == 400
        assert response.json() == {'error': 'Missing required fields'}
        assert await _action_count(db_session, complaint.id) == 0

    @pytest.mark.asyncio
    async def test_malformed_type_id_is_invalid_reference(
        self, client: AsyncClient, test_user, make_complaint, complaint_payload, login_as
    ):
        complaint = await make_complaint(created_by=test_user)
        login_as(test_user)

        response = await client.put(
            f'/api/v1/complaints/{complaint.id}', json=complaint_payload(typeId='not-a-uuid')
        )

        assert response.status_code == 400
        assert response.json() == {'error': 'Invalid reference'}

    @pytest.mark.asyncio
    async def test_absent_complaint_is_not_found_whatever_the_body(
        self, client: AsyncClient, admin_user, complaint_payload, login_as
    ):
        login_as(admin_user)

        for type_id in ('', 'not-a-uuid'):
            response = await client.put(
                f'/api/v1/complaints/{uuid.uuid4()}', json=complaint_payload(typeId=type_id)
            )
            assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_blank_assignee_unassigns(
        self, client: AsyncClient, admin_user, test_user, make_complaint, complaint_payload, login_as
    ):
        complaint = await make_complaint(created_by=admin_user, assigned_to=test_user)
        login_as(admin_user)

        response = await client.put(
            f'/api/v1/complaints/{complaint.id}', json=complaint_payload(assignedToId='')
        )

        assert response.status_code == 200
        assert response.json()['assignedTo'] is None


class TestComplaintNumbers:

    @pytest.mark.asyncio
    async def test_numbers_follow_daily_sequence(
        self, client: AsyncClient, test_user, complaint_payload, login_as
    ):
        login_as(test_user)

        first = await client.post('/api/v1/complaints', json=complaint_payload())
        second = await client.post('/api/v1/complaints', json=complaint_payload())

        first_number = first.json()['complaintNumber']
        second_number = second.json()['complaintNumber']
        assert first_number.rsplit('-', 1)[0] == second_number.rsplit('-', 1)[0]
        assert int(second_number.rsplit('-', 1)[1]) == int(first_number.rsplit('-', 1)[1]) + 1

    @pytest.mark.asyncio
    async def test_taken_number_is_retried(
        self, client: AsyncClient, test_user, make_complaint, complaint_payload, monkeypatch, login_as
    ):
        taken = (await make_complaint(created_by=test_user)).complaint_number
        numbers = iter([taken, 'CMP-20260101-0042'])

        async def next_number(self):
            return next(numbers)

        monkeypatch.setattr(ComplaintService, '_generate_complaint_number', next_number)
        payload = complaint_payload()
        login_as(test_user)

        response = await client.post('/api/v1/complaints', json=payload)

        assert response.status_code == 201
        assert response.json()['complaintNumber'] == 'CMP-20260101-0042'

    @pytest.mark.asyncio
    async def test_number_conflict_when_retries_run_out(
        self, client: AsyncClient, test_user, make_complaint, complaint_payload, monkeypatch, login_as
    ):
        taken = (await make_complaint(created_by=test_user)).complaint_number

        async def same_number(self):
            return taken

        monkeypatch.setattr(ComplaintService, '_generate_complaint_number', same_number)
        payload = complaint_payload()
        login_as(test_user)

        response = await client.post('/api/v1/complaints', json=payload)

        assert response.status_code == 409
        assert response.json() == {'error': 'Complaint number conflict, please retry'}


class TestComplaintActions:

    @pytest.mark.asyncio
    async def test_actions_listed_oldest_first(
        self, client: AsyncClient, test_user, complaint_payload, login_as
    ):
        login_as(test_user)
        created = await client.post('/api/v1/complaints', json=complaint_payload())
        complaint_id = created.json()['id']
        await client.put(f'/api/v1/complaints/{complaint_id}', json=complaint_payload())

        response = await client.get(f'/api/v1/complaints/{complaint_id}/actions')

        assert response.status_code == 200
        actions = response.json()
        assert [a['description'] for a in actions] == ['Complaint created', ACTION_UPDATED]
        assert actions[0]['user'] == {'id': str(test_user.id), 'name': test_user.name}

    @pytest.mark.asyncio
    async def test_actions_forbidden_for_unrelated_user(
        self, client: AsyncClient, make_user, make_complaint, login_as
    ):
        complaint = await make_complaint(created_by=await make_user())
        login_as(await make_user())

        response = await client.get(f'/api/v1/complaints/{complaint.id}/actions')

        assert response.status_code == 403
