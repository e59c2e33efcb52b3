from http import HTTPStatus

import pytest

USERS_URL = '/admin/usuarios'


def _auth(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_token(provider):
    return provider.add_user('admin@daule.gob.ec', 'admin', user_id='admin-1', full_name='Admin Daule')


@pytest.fixture
def tecnico_token(provider):
    return provider.add_user('tecnico@daule.gob.ec', 'tecnico', user_id='tec-1', full_name='Técnico')


def _new_account(**overrides):
    payload = {'email': 'nuevo@daule.gob.ec', 'password': 'secret123', 'full_name': 'Nuevo', 'role': 'tecnico'}
    payload.update(overrides)
    return payload


# -- /admin/usuarios ------------------------------------------------------------


def test_list_requires_authentication(client, provider):
    response = client.get(USERS_URL)

    assert response.status_code == HTTPStatus.UNAUTHORIZED
    data = response.json()
    assert data['success'] is False
    assert data['error_code'] == 'NOT_AUTHENTICATED'
    assert provider.calls['list_profiles'] == 0


def test_list_forbidden_for_tecnico(client, provider, tecnico_token):
    response = client.get(USERS_URL, headers=_auth(tecnico_token))

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json()['error'] == 'No tienes permisos para ver usuarios'
    assert provider.calls['list_profiles'] == 0


def test_list_for_admin(client, admin_token, tecnico_token):
    response = client.get(USERS_URL, headers=_auth(admin_token))

    assert response.status_code == HTTPStatus.OK
    data = response.json()
    assert data['success'] is True
    assert {account['email'] for account in data['accounts']} == {'admin@daule.gob.ec', 'tecnico@daule.gob.ec'}
    # campos nulos não são serializados
    assert 'error' not in data


def test_error_messages_follow_accept_language(client, tecnico_token):
    response = client.get(USERS_URL, headers={**_auth(tecnico_token), 'Accept-Language': 'en-US,en;q=0.9'})

    assert response.json()['error'] == 'You are not allowed to view users'


def test_create_account(client, provider, admin_token):
    response = client.post(USERS_URL, json=_new_account(role='admin'), headers=_auth(admin_token))

    assert response.status_code == HTTPStatus.CREATED
    account = response.json()['account']
    assert account['email'] == 'nuevo@daule.gob.ec'
    assert account['role'] == 'admin'
    assert provider.profiles[account['id']].role == 'admin'
    assert provider.reset_emails[0][1].endswith('/auth/reset-password?invited=true')


def test_create_duplicate_email_conflict(client, admin_token, tecnico_token):
    response = client.post(USERS_URL, json=_new_account(email='tecnico@daule.gob.ec'), headers=_auth(admin_token))

    assert response.status_code == HTTPStatus.CONFLICT
    assert response.json()['error_code'] == 'EMAIL_EXISTS'


def test_create_invalid_role(client, admin_token):
    response = client.post(USERS_URL, json=_new_account(role='supervisor'), headers=_auth(admin_token))

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert response.json()['error_code'] == 'INVALID_ROLE'


def test_create_rejects_malformed_email(client, provider, admin_token):
    response = client.post(USERS_URL, json=_new_account(email='no-es-email'), headers=_auth(admin_token))

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert provider.calls['create_identity'] == 0


def test_create_forbidden_for_tecnico(client, provider, tecnico_token):
    response = client.post(USERS_URL, json=_new_account(), headers=_auth(tecnico_token))

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert provider.calls['create_identity'] == 0


def test_create_profile_failure_rolls_back(client, provider, admin_token):
    provider.fail('update_profile')

    response = client.post(USERS_URL, json=_new_account(), headers=_auth(admin_token))

    assert response.status_code == HTTPStatus.BAD_GATEWAY
    assert response.json()['error_code'] == 'PROFILE_WRITE_FAILED'
    assert provider.calls['delete_identity'] == 1


def test_update_account(client, provider, admin_token, tecnico_token):
    response = client.patch(
        f'{USERS_URL}/tec-1',
        json={'full_name': 'Técnico Senior', 'role': 'admin'},
        headers=_auth(admin_token),
    )

    assert response.status_code == HTTPStatus.OK
    assert response.json()['account']['role'] == 'admin'
    assert provider.profiles['tec-1'].full_name == 'Técnico Senior'


def test_update_unknown_account(client, admin_token):
    response = client.patch(f'{USERS_URL}/missing', json={'role': 'tecnico'}, headers=_auth(admin_token))

    assert response.status_code == HTTPStatus.NOT_FOUND


def test_delete_self_is_forbidden(client, provider, admin_token):
    response = client.delete(f'{USERS_URL}/admin-1', headers=_auth(admin_token))

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json()['error_code'] == 'SELF_DELETE_FORBIDDEN'
    assert provider.calls['delete_identity'] == 0


def test_delete_other_account(client, provider, admin_token, tecnico_token):
    response = client.delete(f'{USERS_URL}/tec-1', headers=_auth(admin_token))

    assert response.status_code == HTTPStatus.OK
    assert 'tec-1' not in provider.identities


def test_tecnico_cannot_delete(client, provider, admin_token, tecnico_token):
    response = client.delete(f'{USERS_URL}/admin-1', headers=_auth(tecnico_token))

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert provider.calls['delete_identity'] == 0
    assert 'admin-1' in provider.identities


def test_toggle_active(client, provider, admin_token, tecnico_token):
    response = client.post(
        f'{USERS_URL}/tec-1/toggle-active',
        json={'current_state': True},
        headers=_auth(admin_token),
    )

    assert response.status_code == HTTPStatus.OK
    assert response.json()['is_active'] is False
    assert provider.profiles['tec-1'].is_active is False


def test_admin_password_reset(client, provider, admin_token):
    response = client.post(
        f'{USERS_URL}/password-reset',
        json={'email': 'tecnico@daule.gob.ec'},
        headers=_auth(admin_token),
    )

    assert response.status_code == HTTPStatus.OK
    assert provider.reset_emails[0][0] == 'tecnico@daule.gob.ec'


def test_demoted_admin_is_refused_on_next_request(client, provider, admin_token):
    assert client.get(USERS_URL, headers=_auth(admin_token)).status_code == HTTPStatus.OK

    provider.profiles['admin-1'].role = 'tecnico'

    assert client.get(USERS_URL, headers=_auth(admin_token)).status_code == HTTPStatus.FORBIDDEN


def test_unreadable_profile_is_refused(client, provider, admin_token):
    provider.fail('read_profile')

    response = client.get(USERS_URL, headers=_auth(admin_token))

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json()['error_code'] == 'NOT_ADMIN'


# -- /auth ----------------------------------------------------------------------


def test_login(client, tecnico_token):
    response = client.post('/auth/login', json={'email': 'tecnico@daule.gob.ec', 'password': 'secret123'})

    assert response.status_code == HTTPStatus.OK
    data = response.json()
    assert data['token']['access_token'] == tecnico_token
    assert data['session']['profile']['role'] == 'tecnico'


def test_login_wrong_password(client, tecnico_token):
    response = client.post('/auth/login', json={'email': 'tecnico@daule.gob.ec', 'password': 'errada'})

    assert response.status_code == HTTPStatus.UNAUTHORIZED


def test_login_inactive_account(client, provider, tecnico_token):
    provider.profiles['tec-1'].is_active = False

    response = client.post('/auth/login', json={'email': 'tecnico@daule.gob.ec', 'password': 'secret123'})

    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json()['error_code'] == 'ACCOUNT_INACTIVE'


def test_login_unreadable_profile(client, provider, tecnico_token):
    provider.fail('read_profile')

    response = client.post('/auth/login', json={'email': 'tecnico@daule.gob.ec', 'password': 'secret123'})

    assert response.status_code == HTTPStatus.BAD_GATEWAY
    assert response.json()['error_code'] == 'PROFILE_UNAVAILABLE'
    assert tecnico_token not in provider.tokens


def test_session(client, tecnico_token):
    response = client.get('/auth/session', headers=_auth(tecnico_token))

    assert response.status_code == HTTPStatus.OK
    assert response.json()['session']['id'] == 'tec-1'


def test_session_without_token(client):
    response = client.get('/auth/session')

    assert response.status_code == HTTPStatus.UNAUTHORIZED


def test_logout(client, provider, tecnico_token):
    response = client.post('/auth/logout', headers=_auth(tecnico_token))

    assert response.status_code == HTTPStatus.OK
    assert tecnico_token not in provider.tokens


def test_forgot_password_unknown_email(client, provider):
    response = client.post('/auth/forgot-password', json={'email': 'nadie@daule.gob.ec'})

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()['error_code'] == 'EMAIL_NOT_FOUND'
    assert provider.reset_emails == []


def test_forgot_password(client, provider, tecnico_token):
    response = client.post('/auth/forgot-password', json={'email': 'tecnico@daule.gob.ec'})

    assert response.status_code == HTTPStatus.OK
    assert provider.reset_emails[0][1].endswith('/auth/reset-password')


def test_reset_password_mismatch(client, tecnico_token):
    response = client.post(
        '/auth/reset-password',
        json={'new_password': 'nueva-clave', 'new_password_confirm': 'otra-clave'},
        headers=_auth(tecnico_token),
    )

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert response.json()['error_code'] == 'PASSWORD_MISMATCH'


def test_reset_password(client, provider, tecnico_token):
    response = client.post(
        '/auth/reset-password',
        json={'new_password': 'nueva-clave', 'new_password_confirm': 'nueva-clave'},
        headers=_auth(tecnico_token),
    )

    assert response.status_code == HTTPStatus.OK
    assert provider.passwords['tec-1'] == 'nueva-clave'
    assert tecnico_token not in provider.tokens
